"""Exchange orchestration: STT -> context -> prompt -> LLM -> TTS -> persistence.

One call to ``respond`` is one exchange. Only an empty message and a failed
transcription stop an exchange early; every other failure degrades the stage
it belongs to and the caller still gets a textual reply:

- context fetch failure: that context section is left empty
- generation failure: FALLBACK_REPLY, only the user message is stored
- synthesis failure: the reply comes back without audio
- persistence failure: logged, the reply is unchanged
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Protocol

from sahayak_common.logging import get_logger

from .context import ContextProvider, gather_context
from .errors import PersistenceError, SynthesisError, TranscriptionError, ValidationError
from .models import ChatSession, MessageRecord
from .profiles import GenerationParams, LengthClass, Tone, Voice
from .prompt import build_prompt
from .sessions import SessionStore

log = get_logger(__name__)

FALLBACK_REPLY = "माफ करना, अभी मैं जवाब नइ दे सकत हंव। थोरकुन बाद फेर पूछव।"


class Generator(Protocol):
    async def generate(self, prompt: str, params: GenerationParams) -> str: ...


class Transcriber(Protocol):
    async def transcribe(self, audio: bytes, language_hint: str | None = None) -> str: ...


class Synthesizer(Protocol):
    async def synthesize(self, text: str, voice: Voice) -> bytes: ...


@dataclass(frozen=True)
class ExchangeResult:
    reply: str
    tone: Tone
    length: LengthClass
    audio: bytes | None = None
    transcript: str | None = None
    generated: bool = True
    persisted: bool = False


class ChatPipeline:
    """Drives one exchange at a time; holds no per-exchange state."""

    def __init__(
        self,
        context_provider: ContextProvider,
        generator: Generator,
        session_store: SessionStore | None = None,
        transcriber: Transcriber | None = None,
        synthesizer: Synthesizer | None = None,
        culture_limit: int = 5,
        weather_limit: int = 3,
        context_timeout: float = 3.0,
        language_hint: str | None = "hi",
        temperature: float = 0.8,
        top_p: float = 0.95,
        top_k: int = 40,
        session_label: str = "नई बातचीत",
        session_language: str = "chhattisgarhi",
    ) -> None:
        self._context_provider = context_provider
        self._generator = generator
        self._session_store = session_store
        self._transcriber = transcriber
        self._synthesizer = synthesizer
        self._culture_limit = culture_limit
        self._weather_limit = weather_limit
        self._context_timeout = context_timeout
        self._language_hint = language_hint
        self._temperature = temperature
        self._top_p = top_p
        self._top_k = top_k
        self._session_label = session_label
        self._session_language = session_language

    @property
    def voice_input_enabled(self) -> bool:
        return self._transcriber is not None

    @property
    def voice_output_enabled(self) -> bool:
        return self._synthesizer is not None

    @property
    def session_store(self) -> SessionStore | None:
        return self._session_store

    def normalize(
        self, message: str | None, tone: str | None = None, length: str | None = None
    ) -> tuple[str, Tone, LengthClass]:
        """Validate the message and resolve tone/length against their tables."""
        text = (message or "").strip()
        if not text:
            raise ValidationError("Message is required")
        return text, Tone.resolve(tone), LengthClass.resolve(length)

    def generation_params(self, length: LengthClass) -> GenerationParams:
        return GenerationParams.for_length(
            length, temperature=self._temperature, top_p=self._top_p, top_k=self._top_k
        )

    async def respond(
        self,
        message: str | None,
        tone: str | None = None,
        length: str | None = None,
        session_id: str | None = None,
        user_id: str | None = None,
        speak: bool = False,
        transcript: str | None = None,
    ) -> ExchangeResult:
        """Run one text exchange."""
        start = time.monotonic()
        text, resolved_tone, resolved_length = self.normalize(message, tone, length)

        context = await gather_context(
            self._context_provider,
            culture_limit=self._culture_limit,
            weather_limit=self._weather_limit,
            timeout=self._context_timeout,
        )
        prompt = build_prompt(resolved_tone, resolved_length, context, text)

        generated = True
        try:
            reply = await self._generator.generate(prompt, self.generation_params(resolved_length))
        except Exception as e:
            log.error("generation_failed", error=str(e))
            reply = FALLBACK_REPLY
            generated = False

        audio = None
        if generated and speak:
            audio = await self._speak(reply, resolved_tone)

        records = [
            MessageRecord(role="user", content=text, user_id=user_id),
        ]
        if generated:
            records.append(
                MessageRecord(
                    role="assistant",
                    content=reply,
                    user_id=user_id,
                    tone=resolved_tone.value,
                    response_length=resolved_length.value,
                )
            )
        persisted = False
        if session_id:
            # Shielded so a caller disconnect cannot cut the transaction short.
            persisted = await asyncio.shield(self._persist(session_id, records))

        log.info(
            "chat_complete",
            tone=resolved_tone.value,
            length=resolved_length.value,
            session_id=session_id,
            generated=generated,
            with_context=not context.is_empty,
            with_audio=audio is not None,
            persisted=persisted,
            processing_time_ms=int((time.monotonic() - start) * 1000),
        )

        return ExchangeResult(
            reply=reply,
            tone=resolved_tone,
            length=resolved_length,
            audio=audio,
            transcript=transcript,
            generated=generated,
            persisted=persisted,
        )

    async def respond_to_audio(
        self,
        audio: bytes,
        tone: str | None = None,
        length: str | None = None,
        session_id: str | None = None,
        user_id: str | None = None,
        speak: bool = False,
    ) -> ExchangeResult:
        """Transcribe recorded audio, then run it as a text exchange."""
        transcript = await self.transcribe(audio)
        return await self.respond(
            transcript,
            tone=tone,
            length=length,
            session_id=session_id,
            user_id=user_id,
            speak=speak,
            transcript=transcript,
        )

    async def transcribe(self, audio: bytes) -> str:
        """Speech-to-text. Any failure here ends the exchange."""
        if not audio:
            raise ValidationError("Audio is required")
        if self._transcriber is None:
            raise TranscriptionError("Speech-to-text is disabled")
        try:
            return await self._transcriber.transcribe(audio, self._language_hint)
        except TranscriptionError:
            raise
        except Exception as e:
            log.error("stt_failed", error=str(e))
            raise TranscriptionError(f"Transcription failed: {e}") from e

    async def synthesize(self, text: str, tone: str | None = None) -> tuple[bytes, Tone]:
        """Standalone text-to-speech; failures propagate to the caller."""
        if self._synthesizer is None:
            raise SynthesisError("Text-to-speech is disabled")
        resolved = Tone.resolve(tone)
        return await self._synthesizer.synthesize(text, resolved.voice), resolved

    async def create_session(
        self, label: str | None = None, language: str | None = None, user_id: str | None = None
    ) -> ChatSession:
        if self._session_store is None:
            raise PersistenceError("Session store is not configured")
        return await self._session_store.create_session(
            label or self._session_label, language or self._session_language, user_id
        )

    async def _speak(self, reply: str, tone: Tone) -> bytes | None:
        if self._synthesizer is None:
            return None
        try:
            return await self._synthesizer.synthesize(reply, tone.voice)
        except Exception as e:
            log.warning("tts_degraded", voice=tone.voice.name, error=str(e))
            return None

    async def _persist(self, session_id: str, records: list[MessageRecord]) -> bool:
        if self._session_store is None:
            return False
        try:
            await self._session_store.append_messages(session_id, records)
        except Exception as e:
            log.error("persistence_failed", session_id=session_id, messages=len(records), error=str(e))
            return False
        return True
