from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    groq_api_key: str = ""
    anthropic_api_key: str = ""
    sarvam_api_key: str = ""
    assemblyai_api_key: str = ""  # Optional: only used when stt_provider is "assemblyai"

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Providers
    llm_provider: str = "groq"
    llm_model: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    llm_base_url: str = "https://api.groq.com/openai/v1"
    anthropic_model: str = "claude-sonnet-4-20250514"
    stt_provider: str = "sarvam"
    sarvam_stt_url: str = "https://api.sarvam.ai/speech-to-text"
    sarvam_tts_url: str = "https://api.sarvam.ai/text-to-speech"
    http_timeout_seconds: float = 60.0

    # Speech
    stt_language: str = "en-IN"
    tts_model: str = "bulbul:v2"
    tts_speaker: str = "vidya"
    tts_language: str = "en-IN"
    tts_pace: float = 0.7
    ffmpeg_binary: str = "ffmpeg"

    # Scratch storage
    upload_dir: str = "uploads"
    audio_dir: str = "audios"
    max_upload_bytes: int = 25 * 1024 * 1024

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
