"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "host"),
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
    )

    # Provider used when a request does not name one
    tts_provider: str = Field(
        default="google",
        validation_alias=AliasChoices("TTS_PROVIDER", "DEFAULT_TTS_PROVIDER", "tts_provider"),
    )
    tts_request_timeout: float = Field(
        default=10.0,
        ge=1,
        validation_alias=AliasChoices("TTS_REQUEST_TIMEOUT", "tts_request_timeout"),
    )

    # Google Translate TTS (no credential required)
    # Overrides the language implied by the selected voice
    google_tts_language: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_TTS_LANGUAGE", "google_tts_language"),
    )
    google_tts_host: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://translate.google.com"),
        validation_alias=AliasChoices("GOOGLE_TTS_HOST", "google_tts_host"),
    )

    # ElevenLabs (optional, only needed for the commercial voices)
    elevenlabs_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVENLABS_API_KEY", "elevenlabs_api_key"),
    )
    elevenlabs_default_voice: str = Field(
        default="21m00Tcm4TlvDq8ikWAM",  # Rachel
        validation_alias=AliasChoices(
            "ELEVENLABS_DEFAULT_VOICE", "elevenlabs_default_voice"
        ),
    )
    elevenlabs_model_id: str = Field(
        default="eleven_multilingual_v2",
        validation_alias=AliasChoices("ELEVENLABS_MODEL_ID", "elevenlabs_model_id"),
    )
    elevenlabs_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://api.elevenlabs.io/v1"),
        validation_alias=AliasChoices("ELEVENLABS_BASE_URL", "elevenlabs_base_url"),
    )

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )
    log_dir: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("LOG_DIR", "log_dir"),
    )
    log_retention_hours: int = Field(
        default=48,
        ge=0,
        validation_alias=AliasChoices("LOG_RETENTION_HOURS", "log_retention_hours"),
    )

    @property
    def elevenlabs_key(self) -> str | None:
        """Return the ElevenLabs key, treating blank values as unset."""
        if self.elevenlabs_api_key is None:
            return None
        value = self.elevenlabs_api_key.get_secret_value().strip()
        return value or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["Settings", "get_settings"]
