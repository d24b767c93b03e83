"""
Pydantic models for request and response validation.

The response models double as the typed payloads of the UI client, so
they accept both the ORM attribute names and the wire names.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=255)


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    user_id: int
    username: str


class TopicCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class TopicResponse(BaseModel):
    id: int = Field(validation_alias=AliasChoices("topic_id", "id"))
    title: str

    model_config = ConfigDict(from_attributes=True)


class NoteCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = ""
    topic_id: int


class NoteResponse(BaseModel):
    id: int = Field(validation_alias=AliasChoices("note_id", "id"))
    title: str
    content: str
    topic_id: int
    last_update: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "TopicCreateRequest",
    "TopicResponse",
    "NoteCreateRequest",
    "NoteResponse",
]
