"""Provider registry: name resolution, availability and adapter construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from voice_relay.config import Settings

from .base import TTSProvider, VoiceOptions
from .elevenlabs_provider import ElevenLabsTTSProvider
from .errors import ConfigurationError, UnsupportedProviderError
from .google_provider import GoogleTTSProvider

logger = logging.getLogger(__name__)

# The credential-free provider used whenever nothing else is available
FREE_PROVIDER = GoogleTTSProvider.name

DEFAULT_PROVIDERS: tuple[type[TTSProvider], ...] = (
    GoogleTTSProvider,
    ElevenLabsTTSProvider,
)


@dataclass(frozen=True)
class ProviderEntry:
    name: str
    display_name: str
    provider_cls: type[TTSProvider]

    def is_configured(self, settings: Settings) -> bool:
        return self.provider_cls.is_configured_for(settings)


class ProviderRegistry:
    """
    Read-only map of provider names to adapters, built once at startup.

    Two resolution paths exist:

    - :meth:`create_service` always builds a fresh adapter and fails closed on
      unknown names.
    - :meth:`resolve` is the request-time path. It reuses one adapter per
      provider (safe because voice options are per-call values), fails closed
      on explicitly requested unknown or unconfigured providers, and only
      falls back to the free provider when nothing was requested and the
      configured default is unusable.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        providers: Sequence[type[TTSProvider]] = DEFAULT_PROVIDERS,
    ) -> None:
        self._settings = settings
        self._http_client = http_client
        entries = {
            cls.name: ProviderEntry(cls.name, cls.display_name, cls) for cls in providers
        }
        if FREE_PROVIDER not in entries:
            raise ValueError(f"Registry requires the '{FREE_PROVIDER}' provider")
        self._entries: Mapping[str, ProviderEntry] = MappingProxyType(entries)
        self._instances: Dict[str, TTSProvider] = {}

    @staticmethod
    def normalize(provider_name: str) -> str:
        return provider_name.strip().lower()

    @property
    def provider_names(self) -> List[str]:
        return list(self._entries)

    @property
    def default_provider(self) -> str:
        """Configured default provider name, falling back to the free provider."""
        configured = self.normalize(self._settings.tts_provider or "")
        return configured or FREE_PROVIDER

    def get_entry(self, provider_name: str) -> ProviderEntry:
        entry = self._entries.get(self.normalize(provider_name))
        if entry is None:
            raise UnsupportedProviderError(provider_name)
        return entry

    def display_name(self, provider_name: str) -> str:
        entry = self._entries.get(self.normalize(provider_name))
        return entry.display_name if entry else provider_name

    def create_service(
        self,
        provider_name: Optional[str] = None,
        options: Mapping[str, Any] | VoiceOptions | None = None,
    ) -> TTSProvider:
        """Build a new adapter for ``provider_name`` (or the default)."""
        selected = provider_name or self.default_provider
        logger.info(f"Creating TTS service for provider: {selected}")
        entry = self.get_entry(selected)
        return entry.provider_cls(
            self._settings, http_client=self._http_client, options=options
        )

    def is_provider_configured(self, provider_name: str) -> bool:
        entry = self._entries.get(self.normalize(provider_name))
        if entry is None:
            return False
        return entry.is_configured(self._settings)

    def get_available_providers(self) -> List[str]:
        """Free provider first, then every other configured provider."""
        providers = [FREE_PROVIDER]
        for name, entry in self._entries.items():
            if name != FREE_PROVIDER and entry.is_configured(self._settings):
                providers.append(name)
        return providers

    def resolve(self, provider_name: Optional[str] = None) -> TTSProvider:
        """Return the cached adapter serving a request."""
        if provider_name:
            entry = self.get_entry(provider_name)
            if not entry.is_configured(self._settings):
                raise ConfigurationError(
                    entry.name, f"{entry.display_name} is not configured on server"
                )
            return self._instance(entry.name)

        selected = self.default_provider
        entry = self._entries.get(selected)
        if entry is None:
            logger.warning(f"Unknown TTS provider: {selected}, falling back to {FREE_PROVIDER}")
            return self._instance(FREE_PROVIDER)
        if not entry.is_configured(self._settings):
            logger.warning(
                f"Default TTS provider {selected} is not configured, "
                f"falling back to {FREE_PROVIDER}"
            )
            return self._instance(FREE_PROVIDER)
        return self._instance(entry.name)

    def adapter(self, provider_name: str) -> TTSProvider:
        """Return the cached adapter for a known provider, configured or not.

        Used for voice listing, where an unconfigured provider still answers
        with its fixed catalog.
        """
        return self._instance(self.get_entry(provider_name).name)

    def _instance(self, name: str) -> TTSProvider:
        instance = self._instances.get(name)
        if instance is None:
            instance = self.create_service(name)
            self._instances[name] = instance
        return instance


__all__ = ["DEFAULT_PROVIDERS", "FREE_PROVIDER", "ProviderEntry", "ProviderRegistry"]
