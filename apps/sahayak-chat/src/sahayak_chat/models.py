"""Session and message records as stored by the session store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChatSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    session_name: str | None = None
    language: str | None = None
    user_id: str | None = None
    created_at: str
    last_active: str


class MessageRecord(BaseModel):
    """A message about to be appended. Ids and timestamps come from the store."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(..., pattern="^(user|assistant)$")
    content: str
    user_id: str | None = None
    tone: str | None = None
    response_length: str | None = None
    audio_url: str | None = None


class ChatMessage(BaseModel):
    """A persisted message. Messages are append-only."""

    model_config = ConfigDict(frozen=True)

    id: str
    session_id: str
    role: str = Field(..., pattern="^(user|assistant)$")
    content: str
    user_id: str | None = None
    tone: str | None = None
    response_length: str | None = None
    audio_url: str | None = None
    created_at: str
