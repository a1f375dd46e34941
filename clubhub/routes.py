"""
HTTP routes for the club backend API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from clubhub.db import PRIVACY_PUBLIC, DbClient, MediaRecord, UserRecord
from clubhub.dependencies import get_db_client, get_upload_storage
from clubhub.errors import BadRequest, ConflictError, InvalidCredentials, NotFound
from clubhub.schemas import (
    ChatMessageCreate,
    ChatMessageOut,
    EventCreate,
    EventOut,
    LoginRequest,
    MediaOut,
    MessageResponse,
    Privacy,
    RegisterRequest,
    TipCreate,
    TipOut,
    UserPublic,
)
from clubhub.security import hash_password, verify_password
from clubhub.storage import UploadStorage

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_out(user: UserRecord) -> UserPublic:
    return UserPublic(**user.public_dict())


def _media_out(media: MediaRecord) -> MediaOut:
    return MediaOut(**media.as_dict())


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value or None


def _store_upload(storage: UploadStorage, upload: UploadFile) -> str:
    url = storage.save(upload.file, upload.filename, upload.content_type)
    logger.info(
        "Stored upload %s via %s -> %s",
        upload.filename,
        storage.__class__.__name__,
        url,
    )
    return url


# ----------------- Users -----------------


@router.post("/users/register", response_model=MessageResponse, status_code=201)
def register(payload: RegisterRequest, db: DbClient = Depends(get_db_client)):
    existing = db.find_user_by_username_or_email(payload.username, payload.email)
    if existing:
        raise ConflictError("Username or email already exists")
    user = db.create_user(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        privacy=PRIVACY_PUBLIC,
    )
    logger.info("Registered user %s (%s)", user.username, user.id)
    return MessageResponse(message="User registered successfully")


@router.post("/users/login", response_model=UserPublic)
def login(payload: LoginRequest, db: DbClient = Depends(get_db_client)):
    user = db.find_user_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for %s", payload.username)
        raise InvalidCredentials("Invalid credentials")
    return _user_out(user)


@router.get("/users/{user_id}", response_model=UserPublic)
def get_user(user_id: str, db: DbClient = Depends(get_db_client)):
    user = db.get_user(user_id)
    if not user:
        raise NotFound("User not found")
    return _user_out(user)


@router.put("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: str,
    privacy: Privacy = Form(...),
    profile_picture: UploadFile | None = File(None),
    db: DbClient = Depends(get_db_client),
    storage: UploadStorage = Depends(get_upload_storage),
):
    """
    Update privacy and, when a file is attached, replace the profile picture.
    """
    if not db.get_user(user_id):
        raise NotFound("User not found")

    picture_url = None
    if _has_file(profile_picture):
        picture_url = _store_upload(storage, profile_picture)

    user = db.update_user(user_id, privacy=privacy, profile_picture=picture_url)
    if not user:
        raise NotFound("User not found")
    return _user_out(user)


# ----------------- Events -----------------


@router.get("/events", response_model=list[EventOut])
def list_events(db: DbClient = Depends(get_db_client)):
    return [EventOut(**event.as_dict()) for event in db.list_events()]


@router.post("/events", response_model=EventOut, status_code=201)
def create_event(payload: EventCreate, db: DbClient = Depends(get_db_client)):
    event = db.create_event(
        name=payload.name,
        date=payload.date,
        location=payload.location,
        agenda=payload.agenda,
    )
    return EventOut(**event.as_dict())


# ----------------- Media -----------------


@router.get("/media", response_model=list[MediaOut])
def list_media(db: DbClient = Depends(get_db_client)):
    return [_media_out(media) for media in db.list_media()]


@router.post("/media", response_model=MediaOut, status_code=201)
def upload_media(
    media: UploadFile | None = File(None),
    user_id: str | None = Form(None),
    description: str | None = Form(None),
    event_id: str | None = Form(None),
    privacy: str | None = Form(None),
    album_id: str | None = Form(None, alias="albumId"),
    db: DbClient = Depends(get_db_client),
    storage: UploadStorage = Depends(get_upload_storage),
):
    """
    Store the attached file, then persist a media record pointing at it.
    Nothing is written when the file is missing or the upload fails.
    """
    if not _has_file(media):
        raise BadRequest("No file uploaded")

    url = _store_upload(storage, media)
    record = db.create_media(
        user_id=user_id,
        description=description,
        url=url,
        privacy=privacy,
        event_id=_blank_to_none(event_id),
        album_id=_blank_to_none(album_id),
    )
    return _media_out(record)


# ----------------- Tips -----------------


@router.get("/tips", response_model=list[TipOut])
def list_tips(db: DbClient = Depends(get_db_client)):
    return [TipOut(**tip.as_dict()) for tip in db.list_tips()]


@router.post("/tips", response_model=TipOut, status_code=201)
def create_tip(payload: TipCreate, db: DbClient = Depends(get_db_client)):
    tip = db.create_tip(
        user_id=payload.user_id, category=payload.category, content=payload.content
    )
    return TipOut(**tip.as_dict())


# ----------------- Messages -----------------


@router.get("/messages", response_model=list[ChatMessageOut])
def list_messages(db: DbClient = Depends(get_db_client)):
    return [ChatMessageOut(**message.as_dict()) for message in db.list_messages()]


@router.post("/messages", response_model=ChatMessageOut, status_code=201)
def create_message(
    payload: ChatMessageCreate, db: DbClient = Depends(get_db_client)
):
    message = db.create_message(user=payload.user, text=payload.text)
    return ChatMessageOut(**message.as_dict())
