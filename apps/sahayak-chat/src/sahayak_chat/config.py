"""Configuration for the sahayak-chat orchestrator."""

from __future__ import annotations

from sahayak_common.config import get_env, get_env_bool, get_env_float, get_env_int, require_env


class ChatConfig:
    """Chat orchestrator configuration from environment variables.

    Read once at import; nothing mutates it afterwards. Credentials have no
    defaults, ``check()`` is called from the app lifespan to fail fast.
    """

    # Generative text service (routed through LiteLLM)
    gemini_api_key: str = get_env("GEMINI_API_KEY", "")
    generation_model: str = get_env("GENERATION_MODEL", "gemini/gemini-1.5-flash")
    generation_timeout: float = get_env_float("GENERATION_TIMEOUT", 30.0)
    temperature: float = get_env_float("GENERATION_TEMPERATURE", 0.8)
    top_p: float = get_env_float("GENERATION_TOP_P", 0.95)
    top_k: int = get_env_int("GENERATION_TOP_K", 40)

    # SQLite for sessions, messages and grounding tables
    db_path: str = get_env("SAHAYAK_DB_PATH", "data/sahayak.db")

    # Grounding context
    culture_row_limit: int = get_env_int("CULTURE_ROW_LIMIT", 5)
    weather_row_limit: int = get_env_int("WEATHER_ROW_LIMIT", 3)
    context_timeout: float = get_env_float("CONTEXT_TIMEOUT", 3.0)

    # Speech-to-text (OpenAI-compatible transcription API)
    stt_enabled: bool = get_env_bool("STT_ENABLED", True)
    stt_url: str = get_env("STT_URL", "https://api.openai.com")
    stt_model: str = get_env("STT_MODEL", "whisper-1")
    stt_language: str = get_env("STT_LANGUAGE", "hi")
    stt_timeout: float = get_env_float("STT_TIMEOUT", 30.0)
    openai_api_key: str = get_env("OPENAI_API_KEY", "")

    # Text-to-speech (ElevenLabs-compatible API)
    tts_enabled: bool = get_env_bool("TTS_ENABLED", True)
    tts_url: str = get_env("TTS_URL", "https://api.elevenlabs.io")
    tts_model: str = get_env("TTS_MODEL", "eleven_multilingual_v2")
    tts_timeout: float = get_env_float("TTS_TIMEOUT", 30.0)
    tts_max_text_length: int = get_env_int("TTS_MAX_TEXT_LENGTH", 5000)
    elevenlabs_api_key: str = get_env("ELEVENLABS_API_KEY", "")

    # Session defaults
    session_label: str = get_env("SESSION_LABEL", "नई बातचीत")
    session_language: str = get_env("SESSION_LANGUAGE", "chhattisgarhi")

    # Server
    host: str = get_env("HOST", "0.0.0.0")
    port: int = get_env_int("PORT", 8000)

    # Logging
    log_level: str = get_env("LOG_LEVEL", "INFO")
    log_format: str = get_env("LOG_FORMAT", "console")

    def required_credentials(self) -> dict[str, str]:
        """Credentials required by the enabled stages, keyed by variable name."""
        required = {"GEMINI_API_KEY": self.gemini_api_key}
        if self.stt_enabled:
            required["OPENAI_API_KEY"] = self.openai_api_key
        if self.tts_enabled:
            required["ELEVENLABS_API_KEY"] = self.elevenlabs_api_key
        return required

    def missing_credentials(self) -> list[str]:
        return [name for name, value in self.required_credentials().items() if not value]

    def check(self) -> None:
        """Raise ConfigError if any required credential is absent."""
        require_env(self.required_credentials())


settings = ChatConfig()
