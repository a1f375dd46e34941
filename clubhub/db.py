"""
Database abstraction for a SQL-backed store and an in-memory test implementation.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import Column, DateTime, Float, String, Text, create_engine, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from clubhub.errors import ConflictError

PRIVACY_PUBLIC = "public"


class DbClient(Protocol):
    """Interface for document store access."""

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        privacy: str = PRIVACY_PUBLIC,
    ) -> "UserRecord":
        ...

    def find_user_by_username_or_email(
        self, username: str, email: str
    ) -> Optional["UserRecord"]:
        ...

    def find_user_by_username(self, username: str) -> Optional["UserRecord"]:
        ...

    def get_user(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def update_user(
        self,
        user_id: str,
        *,
        privacy: str,
        profile_picture: Optional[str] = None,
    ) -> Optional["UserRecord"]:
        ...

    def list_events(self) -> list["EventRecord"]:
        ...

    def create_event(
        self,
        name: Optional[str],
        date: Optional[str],
        location: Optional[str],
        agenda: Optional[str],
    ) -> "EventRecord":
        ...

    def list_media(self) -> list["MediaRecord"]:
        ...

    def create_media(
        self,
        *,
        user_id: Optional[str],
        description: Optional[str],
        url: str,
        privacy: Optional[str],
        event_id: Optional[str] = None,
        album_id: Optional[str] = None,
    ) -> "MediaRecord":
        ...

    def list_tips(self) -> list["TipRecord"]:
        ...

    def create_tip(
        self,
        user_id: Optional[str],
        category: Optional[str],
        content: Optional[str],
    ) -> "TipRecord":
        ...

    def list_messages(self) -> list["MessageRecord"]:
        ...

    def create_message(self, user: Optional[str], text: Optional[str]) -> "MessageRecord":
        ...


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserRecord:
    id: str
    username: str
    email: str
    password_hash: str
    profile_picture: Optional[str] = None
    privacy: str = PRIVACY_PUBLIC
    created_at: float = field(default_factory=lambda: time.time())

    def public_dict(self) -> dict:
        """Fields safe to return to clients; the password hash is left out."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "profile_picture": self.profile_picture,
            "privacy": self.privacy,
        }


@dataclass
class EventRecord:
    id: str
    name: Optional[str]
    date: Optional[str]
    location: Optional[str]
    agenda: Optional[str]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "location": self.location,
            "agenda": self.agenda,
        }


@dataclass
class MediaRecord:
    id: str
    user_id: Optional[str]
    description: Optional[str]
    url: str
    privacy: Optional[str] = None
    event_id: Optional[str] = None
    album_id: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "description": self.description,
            "url": self.url,
            "privacy": self.privacy,
            "event_id": self.event_id,
            "album_id": self.album_id,
        }


@dataclass
class TipRecord:
    id: str
    user_id: Optional[str]
    category: Optional[str]
    content: Optional[str]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "category": self.category,
            "content": self.content,
        }


@dataclass
class MessageRecord:
    id: str
    user: Optional[str]
    text: Optional[str]
    timestamp: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.user,
            "text": self.text,
            "timestamp": self.timestamp,
        }


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.events: Dict[str, EventRecord] = {}
        self.media: Dict[str, MediaRecord] = {}
        self.tips: Dict[str, TipRecord] = {}
        self.messages: Dict[str, MessageRecord] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.events.clear()
        self.media.clear()
        self.tips.clear()
        self.messages.clear()

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        privacy: str = PRIVACY_PUBLIC,
    ) -> UserRecord:
        record = UserRecord(
            id=_new_id(),
            username=username,
            email=email,
            password_hash=password_hash,
            privacy=privacy,
        )
        self.users[record.id] = record
        return record

    def find_user_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[UserRecord]:
        for user in list(self.users.values()):
            if user.username == username or user.email == email:
                return user
        return None

    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in list(self.users.values()):
            if user.username == username:
                return user
        return None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def update_user(
        self,
        user_id: str,
        *,
        privacy: str,
        profile_picture: Optional[str] = None,
    ) -> Optional[UserRecord]:
        user = self.users.get(user_id)
        if not user:
            return None
        user.privacy = privacy
        if profile_picture:
            user.profile_picture = profile_picture
        return user

    def list_events(self) -> list[EventRecord]:
        return list(self.events.values())

    def create_event(
        self,
        name: Optional[str],
        date: Optional[str],
        location: Optional[str],
        agenda: Optional[str],
    ) -> EventRecord:
        record = EventRecord(
            id=_new_id(), name=name, date=date, location=location, agenda=agenda
        )
        self.events[record.id] = record
        return record

    def list_media(self) -> list[MediaRecord]:
        return list(self.media.values())

    def create_media(
        self,
        *,
        user_id: Optional[str],
        description: Optional[str],
        url: str,
        privacy: Optional[str],
        event_id: Optional[str] = None,
        album_id: Optional[str] = None,
    ) -> MediaRecord:
        record = MediaRecord(
            id=_new_id(),
            user_id=user_id,
            description=description,
            url=url,
            privacy=privacy,
            event_id=event_id,
            album_id=album_id,
        )
        self.media[record.id] = record
        return record

    def list_tips(self) -> list[TipRecord]:
        return list(self.tips.values())

    def create_tip(
        self,
        user_id: Optional[str],
        category: Optional[str],
        content: Optional[str],
    ) -> TipRecord:
        record = TipRecord(
            id=_new_id(), user_id=user_id, category=category, content=content
        )
        self.tips[record.id] = record
        return record

    def list_messages(self) -> list[MessageRecord]:
        return list(self.messages.values())

    def create_message(self, user: Optional[str], text: Optional[str]) -> MessageRecord:
        record = MessageRecord(id=_new_id(), user=user, text=text)
        self.messages[record.id] = record
        return record


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            id=row.id,
            username=row.username,
            email=row.email,
            password_hash=row.password_hash,
            profile_picture=row.profile_picture,
            privacy=row.privacy,
            created_at=row.created_at,
        )

    def _to_media_record(self, row: "MediaRow") -> MediaRecord:
        return MediaRecord(
            id=row.id,
            user_id=row.user_id,
            description=row.description,
            url=row.url,
            privacy=row.privacy,
            event_id=row.event_id,
            album_id=row.album_id,
            created_at=row.created_at,
        )

    def _to_message_record(self, row: "MessageRow") -> MessageRecord:
        timestamp = row.timestamp
        # SQLite drops tzinfo on the way back out.
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return MessageRecord(id=row.id, user=row.user, text=row.text, timestamp=timestamp)

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        privacy: str = PRIVACY_PUBLIC,
    ) -> UserRecord:
        with self.Session() as session:
            row = UserRow(
                id=_new_id(),
                username=username,
                email=email,
                password_hash=password_hash,
                privacy=privacy,
                created_at=time.time(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError() from exc
            return self._to_user_record(row)

    def find_user_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = (
                select(UserRow)
                .where(or_(UserRow.username == username, UserRow.email == email))
                .limit(1)
            )
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = select(UserRow).where(UserRow.username == username).limit(1)
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def update_user(
        self,
        user_id: str,
        *,
        privacy: str,
        profile_picture: Optional[str] = None,
    ) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            if not row:
                return None
            row.privacy = privacy
            if profile_picture:
                row.profile_picture = profile_picture
            session.commit()
            session.refresh(row)
            return self._to_user_record(row)

    def list_events(self) -> list[EventRecord]:
        with self.Session() as session:
            rows = session.query(EventRow).order_by(EventRow.created_at.asc()).all()
            return [
                EventRecord(
                    id=row.id,
                    name=row.name,
                    date=row.date,
                    location=row.location,
                    agenda=row.agenda,
                )
                for row in rows
            ]

    def create_event(
        self,
        name: Optional[str],
        date: Optional[str],
        location: Optional[str],
        agenda: Optional[str],
    ) -> EventRecord:
        record = EventRecord(
            id=_new_id(), name=name, date=date, location=location, agenda=agenda
        )
        with self.Session() as session:
            session.add(EventRow(created_at=time.time(), **record.as_dict()))
            session.commit()
        return record

    def list_media(self) -> list[MediaRecord]:
        with self.Session() as session:
            rows = session.query(MediaRow).order_by(MediaRow.created_at.asc()).all()
            return [self._to_media_record(row) for row in rows]

    def create_media(
        self,
        *,
        user_id: Optional[str],
        description: Optional[str],
        url: str,
        privacy: Optional[str],
        event_id: Optional[str] = None,
        album_id: Optional[str] = None,
    ) -> MediaRecord:
        with self.Session() as session:
            row = MediaRow(
                id=_new_id(),
                user_id=user_id,
                description=description,
                url=url,
                privacy=privacy,
                event_id=event_id,
                album_id=album_id,
                created_at=time.time(),
            )
            session.add(row)
            session.commit()
            return self._to_media_record(row)

    def list_tips(self) -> list[TipRecord]:
        with self.Session() as session:
            rows = session.query(TipRow).order_by(TipRow.created_at.asc()).all()
            return [
                TipRecord(
                    id=row.id,
                    user_id=row.user_id,
                    category=row.category,
                    content=row.content,
                )
                for row in rows
            ]

    def create_tip(
        self,
        user_id: Optional[str],
        category: Optional[str],
        content: Optional[str],
    ) -> TipRecord:
        record = TipRecord(
            id=_new_id(), user_id=user_id, category=category, content=content
        )
        with self.Session() as session:
            session.add(TipRow(created_at=time.time(), **record.as_dict()))
            session.commit()
        return record

    def list_messages(self) -> list[MessageRecord]:
        with self.Session() as session:
            rows = (
                session.query(MessageRow)
                .order_by(MessageRow.timestamp.asc())
                .all()
            )
            return [self._to_message_record(row) for row in rows]

    def create_message(self, user: Optional[str], text: Optional[str]) -> MessageRecord:
        with self.Session() as session:
            row = MessageRow(
                id=_new_id(),
                user=user,
                text=text,
                timestamp=_utcnow(),
            )
            session.add(row)
            session.commit()
            return self._to_message_record(row)


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    username = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    profile_picture = Column(String, nullable=True)
    privacy = Column(String, nullable=True, default=PRIVACY_PUBLIC)
    created_at = Column(Float, nullable=False)


class EventRow(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    date = Column(String, nullable=True)
    location = Column(String, nullable=True)
    agenda = Column(Text, nullable=True)
    created_at = Column(Float, nullable=False)


class MediaRow(Base):
    __tablename__ = "media"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=True, index=True)
    description = Column(Text, nullable=True)
    url = Column(String, nullable=False)
    privacy = Column(String, nullable=True)
    event_id = Column(String, nullable=True, index=True)
    album_id = Column(String, nullable=True, index=True)
    created_at = Column(Float, nullable=False)


class TipRow(Base):
    __tablename__ = "tips"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=True, index=True)
    category = Column(String, nullable=True)
    content = Column(Text, nullable=True)
    created_at = Column(Float, nullable=False)


class MessageRow(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True)
    user = Column(String, nullable=True)
    text = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
