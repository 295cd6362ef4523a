"""Chat API routes: sessions, text and voice chat, standalone speech endpoints."""

from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException, Query

from sahayak_common.auth import ClientAPIKey
from sahayak_common.errors import error_response
from sahayak_common.logging import get_logger

from .config import settings
from .errors import SynthesisError, ValidationError
from .pipeline import ChatPipeline, ExchangeResult
from .profiles import DEFAULT_LENGTH, DEFAULT_TONE, LengthClass, Tone
from .schemas import (
    ChatRequest,
    ChatResponse,
    LengthInfo,
    MessageResponse,
    ProfilesResponse,
    SessionCreateRequest,
    SessionResponse,
    SynthesizeRequest,
    SynthesizeResponse,
    ToneInfo,
    TranscribeRequest,
    TranscribeResponse,
    VoiceChatRequest,
)

log = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["chat"])

_pipeline: ChatPipeline | None = None


def get_pipeline() -> ChatPipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Chat pipeline not initialized")
    return _pipeline


def set_pipeline(pipeline: ChatPipeline | None) -> None:
    global _pipeline
    _pipeline = pipeline


def _decode_audio(encoded: str) -> bytes:
    try:
        audio = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Audio is not valid base64: {e}", user_message="आवाज के डेटा ठीक नइ हे।") from e
    if not audio:
        raise ValidationError("Audio is empty", user_message="कोनो आवाज नइ मिलिस।")
    return audio


def _to_response(result: ExchangeResult) -> ChatResponse:
    return ChatResponse(
        response=result.reply,
        emotion=result.tone.value,
        response_length=result.length.value,
        audio_content=base64.b64encode(result.audio).decode("ascii") if result.audio else None,
        transcript=result.transcript,
    )


@router.post("/sessions", response_model=SessionResponse)
async def create_session(
    req: SessionCreateRequest,
    _auth: ClientAPIKey = None,
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> SessionResponse:
    """Start a conversation. Call once before the first message."""
    session = await pipeline.create_session(req.label, req.language, req.user_id)
    return SessionResponse(**session.model_dump())


@router.get("/sessions/{session_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    session_id: str,
    limit: int = Query(20, ge=1, le=200),
    _auth: ClientAPIKey = None,
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> list[MessageResponse]:
    """Most recent messages of a session, oldest first."""
    store = pipeline.session_store
    if store is None:
        raise HTTPException(status_code=503, detail="Session store not configured")
    if await store.get_session(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    messages = await store.recent_messages(session_id, limit)
    return [
        MessageResponse(
            id=m.id,
            role=m.role,
            content=m.content,
            emotion=m.tone,
            response_length=m.response_length,
            audio_url=m.audio_url,
            created_at=m.created_at,
        )
        for m in messages
    ]


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    req: ChatRequest,
    _auth: ClientAPIKey = None,
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> ChatResponse:
    """Text chat. Generation failures still answer 200 with the fallback reply."""
    result = await pipeline.respond(
        req.message,
        tone=req.tone,
        length=req.response_length,
        session_id=req.session_id,
        user_id=req.user_id,
        speak=req.voice,
    )
    return _to_response(result)


@router.post("/chat/voice", response_model=ChatResponse, response_model_exclude_none=True)
async def voice_chat(
    req: VoiceChatRequest,
    _auth: ClientAPIKey = None,
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> ChatResponse:
    """Chat from recorded audio (base64). A failed transcription is an error."""
    if not pipeline.voice_input_enabled:
        return error_response("service_unavailable", "Speech-to-text is disabled", status_code=503)
    audio = _decode_audio(req.audio)
    result = await pipeline.respond_to_audio(
        audio,
        tone=req.tone,
        length=req.response_length,
        session_id=req.session_id,
        user_id=req.user_id,
        speak=req.voice,
    )
    return _to_response(result)


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(
    req: TranscribeRequest,
    _auth: ClientAPIKey = None,
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> TranscribeResponse:
    """Standalone speech-to-text."""
    if not pipeline.voice_input_enabled:
        return error_response("service_unavailable", "Speech-to-text is disabled", status_code=503)
    text = await pipeline.transcribe(_decode_audio(req.audio))
    return TranscribeResponse(text=text)


@router.post("/synthesize", response_model=SynthesizeResponse)
async def synthesize(
    req: SynthesizeRequest,
    _auth: ClientAPIKey = None,
    pipeline: ChatPipeline = Depends(get_pipeline),
) -> SynthesizeResponse:
    """Standalone text-to-speech with the voice of the requested tone."""
    if not pipeline.voice_output_enabled:
        return error_response("service_unavailable", "Text-to-speech is disabled", status_code=503)
    if not req.text.strip():
        raise ValidationError("Text cannot be empty")
    if len(req.text) > settings.tts_max_text_length:
        raise ValidationError(
            f"Text too long. Maximum: {settings.tts_max_text_length} chars",
            user_message="लिखे बात बहुत लंबा हे।",
        )
    try:
        audio, tone = await pipeline.synthesize(req.text, req.tone)
    except SynthesisError:
        raise
    except Exception as e:
        log.error("tts_failed", error=str(e))
        raise SynthesisError(f"Synthesis failed: {e}") from e
    return SynthesizeResponse(
        audio_content=base64.b64encode(audio).decode("ascii"),
        emotion=tone.value,
        voice=tone.voice.name,
    )


@router.get("/tones", response_model=ProfilesResponse)
async def list_profiles() -> ProfilesResponse:
    """Tone and length tables the client can choose from."""
    return ProfilesResponse(
        tones=[ToneInfo(name=t.value, voice=t.voice.name, default=t is DEFAULT_TONE) for t in Tone],
        lengths=[
            LengthInfo(name=length.value, max_output_tokens=length.max_output_tokens, default=length is DEFAULT_LENGTH)
            for length in LengthClass
        ],
    )
