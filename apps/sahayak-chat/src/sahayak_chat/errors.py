"""Error taxonomy for a chat exchange.

Only ValidationError and TranscriptionError end an exchange early. The rest
are raised by collaborators and absorbed by the pipeline, which degrades the
feature they belong to.
"""

from __future__ import annotations


class ChatError(Exception):
    """Base class. ``user_message`` is what a caller may show to the end user."""

    code = "chat_error"
    status_code = 500
    user_message = "कुछ गड़बड़ हो गे। थोरकुन बाद फेर कोसिस करव।"

    def __init__(self, detail: str = "", user_message: str | None = None) -> None:
        super().__init__(detail or self.code)
        self.detail = detail or self.code
        if user_message is not None:
            self.user_message = user_message


class ValidationError(ChatError):
    code = "validation_error"
    status_code = 400
    user_message = "संदेस खाली हे, कुछु लिख के भेजव।"


class TranscriptionError(ChatError):
    code = "transcription_failed"
    status_code = 502
    user_message = "आवाज ल समझ नइ पाएन, फेर से बोलव या लिख के पूछव।"


class GenerationError(ChatError):
    code = "generation_failed"
    status_code = 502


class ContextFetchError(ChatError):
    code = "context_fetch_failed"


class SynthesisError(ChatError):
    code = "synthesis_failed"
    status_code = 502
    user_message = "अभी आवाज नइ बन पाइस।"


class PersistenceError(ChatError):
    code = "persistence_failed"
