"""HTTP clients for the speech-to-text and text-to-speech providers.

Transcription speaks the OpenAI ``/v1/audio/transcriptions`` API and
synthesis the ElevenLabs ``/v1/text-to-speech/{voice_id}`` API. Each failure
is raised as the typed error of its stage; the pipeline decides whether that
is fatal.
"""

from __future__ import annotations

import httpx

from sahayak_common.logging import get_logger

from .errors import SynthesisError, TranscriptionError
from .profiles import Voice

log = get_logger(__name__)


class _HTTPService:
    """Owns one httpx.AsyncClient for the lifetime of the app."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str],
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = headers
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError(f"{type(self).__name__} not started")
        return self._client


class TranscriptionClient(_HTTPService):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com",
        model: str = "whisper-1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, {"Authorization": f"Bearer {api_key}"}, timeout, transport)
        self._model = model

    async def transcribe(
        self, audio: bytes, language_hint: str | None = None, content_type: str = "audio/webm"
    ) -> str:
        """Send audio to the STT provider and return the recognised text."""
        data = {"model": self._model}
        if language_hint:
            data["language"] = language_hint
        try:
            resp = await self.client.post(
                "/v1/audio/transcriptions",
                files={"file": ("audio.webm", audio, content_type)},
                data=data,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("stt_call_failed", error=str(e))
            raise TranscriptionError(f"Transcription failed: {e}") from e

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            log.error("stt_malformed_response")
            raise TranscriptionError("Transcription response carried no text")

        log.info("stt_complete", size_bytes=len(audio), text_length=len(text))
        return text


class SynthesisClient(_HTTPService):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io",
        model: str = "eleven_multilingual_v2",
        timeout: float = 30.0,
        max_text_length: int = 5000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, {"xi-api-key": api_key, "Accept": "audio/mpeg"}, timeout, transport)
        self._model = model
        self._max_text_length = max_text_length

    async def synthesize(self, text: str, voice: Voice) -> bytes:
        """Render text with the given voice. Returns MP3 bytes."""
        if not text.strip():
            raise SynthesisError("Text cannot be empty")
        if len(text) > self._max_text_length:
            raise SynthesisError(f"Text too long. Maximum: {self._max_text_length} chars")

        try:
            resp = await self.client.post(
                f"/v1/text-to-speech/{voice.voice_id}",
                json={
                    "text": text,
                    "model_id": self._model,
                    "voice_settings": {
                        "stability": 0.5,
                        "similarity_boost": 0.8,
                        "style": 0.0,
                        "use_speaker_boost": True,
                    },
                },
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            log.error("tts_call_failed", voice=voice.name, error=str(e))
            raise SynthesisError(f"Synthesis failed: {e}") from e

        if not resp.content:
            log.error("tts_empty_audio", voice=voice.name)
            raise SynthesisError("Synthesis returned no audio")

        log.info("tts_complete", voice=voice.name, text_length=len(text), size_bytes=len(resp.content))
        return resp.content
