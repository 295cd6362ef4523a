"""FastAPI application for sahayak-chat."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sahayak_common.errors import error_response, http_exception_handler, request_validation_handler
from sahayak_common.health import create_health_router
from sahayak_common.logging import get_logger, setup_logging
from sahayak_common.middleware import add_common_middleware

from .config import settings
from .context import SQLiteContextProvider
from .errors import ChatError
from .generation import GenerationClient
from .pipeline import ChatPipeline
from .routes import router as chat_router, set_pipeline
from .sessions import SessionStore
from .speech import SynthesisClient, TranscriptionClient

log = get_logger(__name__)

_session_store = SessionStore(settings.db_path)
_context_provider = SQLiteContextProvider(settings.db_path)
_transcriber = (
    TranscriptionClient(
        settings.openai_api_key,
        base_url=settings.stt_url,
        model=settings.stt_model,
        timeout=settings.stt_timeout,
    )
    if settings.stt_enabled
    else None
)
_synthesizer = (
    SynthesisClient(
        settings.elevenlabs_api_key,
        base_url=settings.tts_url,
        model=settings.tts_model,
        timeout=settings.tts_timeout,
        max_text_length=settings.tts_max_text_length,
    )
    if settings.tts_enabled
    else None
)


def build_pipeline() -> ChatPipeline:
    return ChatPipeline(
        context_provider=_context_provider,
        generator=GenerationClient(
            settings.generation_model,
            settings.gemini_api_key,
            timeout=settings.generation_timeout,
        ),
        session_store=_session_store,
        transcriber=_transcriber,
        synthesizer=_synthesizer,
        culture_limit=settings.culture_row_limit,
        weather_limit=settings.weather_row_limit,
        context_timeout=settings.context_timeout,
        language_hint=settings.stt_language or None,
        temperature=settings.temperature,
        top_p=settings.top_p,
        top_k=settings.top_k,
        session_label=settings.session_label,
        session_language=settings.session_language,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging("sahayak-chat", settings.log_level, json_output=settings.log_format == "json")
    settings.check()

    # Ensure data directory exists
    os.makedirs(os.path.dirname(settings.db_path) or ".", exist_ok=True)

    await _session_store.init()
    await _context_provider.init()
    for client in (_transcriber, _synthesizer):
        if client is not None:
            await client.start()
    set_pipeline(build_pipeline())
    log.info(
        "sahayak_chat_ready",
        model=settings.generation_model,
        voice_input=_transcriber is not None,
        voice_output=_synthesizer is not None,
    )
    yield
    set_pipeline(None)
    for client in (_transcriber, _synthesizer):
        if client is not None:
            await client.close()
    await _context_provider.close()
    await _session_store.close()


async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    log.warning("chat_error", code=exc.code, detail=exc.detail, path=request.url.path)
    return error_response(code=exc.code, message=exc.user_message, status_code=exc.status_code)


def _health_details() -> dict:
    return {
        "model": settings.generation_model,
        "voice_input": _transcriber is not None,
        "voice_output": _synthesizer is not None,
        "checks": {"credentials": not settings.missing_credentials()},
    }


app = FastAPI(title="sahayak-chat", lifespan=lifespan)

add_common_middleware(app)
app.add_exception_handler(ChatError, chat_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.include_router(create_health_router("sahayak-chat", "0.1.0", details_fn=_health_details))
app.include_router(chat_router)
