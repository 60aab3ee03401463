"""Exception types raised by the TTS provider layer."""

from __future__ import annotations

from typing import Any


class TTSError(Exception):
    """Base class for every TTS failure surfaced by the provider layer."""


class ConfigurationError(TTSError):
    """A provider is missing a required credential or setting."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class ChunkingError(TTSError):
    """Text could not be split into chunks (invalid limit)."""


class UnsupportedProviderError(TTSError):
    """An explicitly requested provider name is not registered."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported TTS provider: {provider}")
        self.provider = provider


class ProviderTransportError(TTSError):
    """A remote provider call failed or returned an unusable response."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.detail = detail


# Shorter name used by callers that only care that the provider failed
ProviderError = ProviderTransportError


class VoiceCatalogUnavailable(TTSError):
    """Remote voice listing failed; callers substitute the static catalog."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class SynthesisCancelled(TTSError):
    """Synthesis was cancelled through its cancellation token."""


__all__ = [
    "ChunkingError",
    "ConfigurationError",
    "ProviderError",
    "ProviderTransportError",
    "SynthesisCancelled",
    "TTSError",
    "UnsupportedProviderError",
    "VoiceCatalogUnavailable",
]
