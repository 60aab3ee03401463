"""Request-level synthesis entry point used by the HTTP and WebSocket layers."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

from .base import AudioResult, SynthesisRequest, VoiceDescriptor
from .cancellation import CancellationToken
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


class SynthesisOrchestrator:
    """Resolves a provider for each request and wraps its audio."""

    def __init__(self, registry: ProviderRegistry) -> None:
        self.registry = registry

    async def synthesize(
        self,
        request: SynthesisRequest,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> AudioResult:
        provider = self.registry.resolve(request.provider_name)
        voice_options = provider.merge_options(request.voice_options)

        audio = await provider.synthesize(request.text, voice_options, cancel=cancel)

        return AudioResult(
            audio=audio,
            provider=provider.name,
            voice_options=MappingProxyType(voice_options.model_dump()),
        )

    async def synthesize_text(
        self,
        text: str,
        provider_name: Optional[str] = None,
        voice_options: Optional[Mapping[str, Any]] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> AudioResult:
        request = SynthesisRequest(
            text=text,
            provider_name=provider_name,
            voice_options=voice_options or {},
        )
        return await self.synthesize(request, cancel=cancel)

    async def list_voices(self, provider_name: Optional[str] = None) -> List[VoiceDescriptor]:
        """Voices of the named (or default) provider. Only unknown names raise."""
        if provider_name:
            provider = self.registry.adapter(provider_name)
        else:
            provider = self.registry.resolve()
        return await provider.list_voices()

    def get_available_providers(self) -> List[str]:
        return self.registry.get_available_providers()

    def failure_message(self, provider_name: Optional[str], exc: Exception) -> str:
        """User-facing message for a failed synthesis."""
        name = getattr(exc, "provider", None) or provider_name or self.registry.default_provider
        return f"Failed to generate audio with {self.registry.display_name(name)}: {exc}"


__all__ = ["SynthesisOrchestrator"]
