import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from voice_relay.config import Settings  # noqa: E402

_PROVIDER_ENV = (
    "TTS_PROVIDER",
    "DEFAULT_TTS_PROVIDER",
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_DEFAULT_VOICE",
    "ELEVENLABS_MODEL_ID",
    "ELEVENLABS_BASE_URL",
    "GOOGLE_TTS_LANGUAGE",
    "GOOGLE_TTS_HOST",
    "LOG_DIR",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of provider configuration."""
    for name in _PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)


def _build_settings(**overrides) -> Settings:
    """Build settings that ignore any local `.env` file."""
    return Settings(_env_file=None, **overrides)  # pyright: ignore[reportCallIssue]


@pytest.fixture
def make_settings():
    return _build_settings


@pytest.fixture
def settings() -> Settings:
    return _build_settings()
