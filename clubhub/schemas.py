"""
Pydantic schemas for the club backend.

Records go out with a Mongo-style ``_id`` key, which is what the mobile
client reads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Privacy = Literal["public", "members_only"]


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    username: str
    password: str


class MessageResponse(BaseModel):
    message: str


class UserPublic(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    username: str
    email: str
    profile_picture: Optional[str] = None
    privacy: Optional[Privacy] = None


class EventCreate(BaseModel):
    name: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    agenda: Optional[str] = None


class EventOut(EventCreate):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")


class MediaOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    user_id: Optional[str] = None
    description: Optional[str] = None
    url: str
    event_id: Optional[str] = None
    privacy: Optional[str] = None
    album_id: Optional[str] = Field(None, alias="albumId")


class TipCreate(BaseModel):
    user_id: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None


class TipOut(TipCreate):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")


class ChatMessageCreate(BaseModel):
    user: Optional[str] = None
    text: Optional[str] = None


class ChatMessageOut(ChatMessageCreate):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    timestamp: datetime
