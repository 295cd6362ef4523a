"""Generative text service client.

LiteLLM does the provider routing (``gemini/...`` by default); this module
only maps its outcome onto a reply string or a GenerationError.
"""

from __future__ import annotations

import time

import litellm

from sahayak_common.logging import get_logger

from .errors import GenerationError
from .profiles import GenerationParams

log = get_logger(__name__)


class GenerationClient:
    """Single-shot text generation. Never retries."""

    def __init__(self, model: str, api_key: str, timeout: float = 30.0) -> None:
        self._model = model
        self._api_key = api_key
        self._timeout = timeout

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str, params: GenerationParams) -> str:
        """Send one prompt and return the first candidate's text."""
        start = time.monotonic()
        try:
            response = await litellm.acompletion(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=params.temperature,
                top_p=params.top_p,
                top_k=params.top_k,
                max_tokens=params.max_output_tokens,
                api_key=self._api_key,
                timeout=self._timeout,
                # lets LiteLLM drop params (top_k) the routed provider does not accept
                drop_params=True,
            )
        except Exception as e:
            log.error("llm_error", model=self._model, error=str(e))
            raise GenerationError(f"LLM call failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        if not choices:
            log.error("llm_empty_response", model=self._model)
            raise GenerationError("LLM returned no candidates")

        message = getattr(choices[0], "message", None)
        text = getattr(message, "content", None)
        if not isinstance(text, str) or not text.strip():
            log.error("llm_malformed_response", model=self._model)
            raise GenerationError("LLM returned an empty candidate")

        log.info(
            "llm_complete",
            model=self._model,
            max_tokens=params.max_output_tokens,
            processing_time_ms=int((time.monotonic() - start) * 1000),
        )
        return text
