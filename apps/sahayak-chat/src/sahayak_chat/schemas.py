"""Request/response schemas for the chat service.

Field names on the wire follow the web client (camelCase); ``tone`` is also
accepted under its older name ``emotion``.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Options(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tone: str | None = Field(None, validation_alias=AliasChoices("tone", "emotion"))
    response_length: str | None = Field(
        None, validation_alias=AliasChoices("responseLength", "response_length")
    )
    session_id: str | None = Field(None, validation_alias=AliasChoices("sessionId", "session_id"))
    user_id: str | None = Field(None, validation_alias=AliasChoices("userId", "user_id"))
    voice: bool = False  # ask for synthesized audio with the reply


class ChatRequest(_Options):
    """POST /v1/chat request body."""
    message: str


class VoiceChatRequest(_Options):
    """POST /v1/chat/voice request body; ``audio`` is base64."""
    audio: str


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    emotion: str
    response_length: str = Field(..., alias="responseLength")
    audio_content: str | None = Field(None, alias="audioContent")
    transcript: str | None = None


class SessionCreateRequest(BaseModel):
    label: str | None = None
    language: str | None = None
    user_id: str | None = Field(None, validation_alias=AliasChoices("userId", "user_id"))


class SessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    session_name: str | None = Field(None, alias="sessionName")
    language: str | None = None
    user_id: str | None = Field(None, alias="userId")
    created_at: str = Field(..., alias="createdAt")
    last_active: str = Field(..., alias="lastActive")


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    role: str
    content: str
    emotion: str | None = None
    response_length: str | None = Field(None, alias="responseLength")
    audio_url: str | None = Field(None, alias="audioUrl")
    created_at: str = Field(..., alias="createdAt")


class TranscribeRequest(BaseModel):
    audio: str


class TranscribeResponse(BaseModel):
    text: str
    language: str = "chhattisgarhi"


class SynthesizeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    tone: str | None = Field(None, validation_alias=AliasChoices("tone", "emotion"))


class SynthesizeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_content: str = Field(..., alias="audioContent")
    emotion: str
    voice: str


class ToneInfo(BaseModel):
    name: str
    voice: str
    default: bool = False


class LengthInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    max_output_tokens: int = Field(..., alias="maxOutputTokens")
    default: bool = False


class ProfilesResponse(BaseModel):
    tones: list[ToneInfo]
    lengths: list[LengthInfo]
