"""Shared provider contract and data types for TTS synthesis."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Mapping, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict

from voice_relay.config import Settings

from .cancellation import CancellationToken
from .errors import ConfigurationError, ProviderTransportError, VoiceCatalogUnavailable
from .text_chunker import TextChunk, chunk_text

logger = logging.getLogger(__name__)

AUDIO_FORMAT = "mp3"


class VoiceDescriptor(BaseModel):
    """Uniform description of a selectable voice, regardless of provider."""

    id: str
    name: str
    language: str
    provider: str
    gender: Optional[str] = None
    preview_url: Optional[str] = None


class VoiceOptions(BaseModel):
    """Base for per-provider voice settings. Values are immutable."""

    model_config = ConfigDict(frozen=True, extra="ignore")


@dataclass(frozen=True)
class SynthesisRequest:
    text: str
    provider_name: Optional[str] = None
    voice_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AudioResult:
    """Synthesized audio handed back to the caller."""

    audio: bytes
    provider: str
    voice_options: Mapping[str, Any]
    format: str = AUDIO_FORMAT


class TTSProvider(ABC):
    """
    Capability set every TTS provider implements.

    Concrete providers supply the per-chunk remote call and their voice
    catalog; this base handles credential checks, option merging, chunking,
    concurrent dispatch, ordered reassembly and cancellation.

    Voice options passed to :meth:`synthesize` are merged into a fresh value
    for that call only, so concurrent requests sharing an instance never see
    each other's settings.
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    max_text_length: ClassVar[int]
    options_model: ClassVar[type[VoiceOptions]]

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        options: Mapping[str, Any] | VoiceOptions | None = None,
    ) -> None:
        self._settings = settings
        self._http_client = http_client
        self._timeout = settings.tts_request_timeout
        self._voice_options = self.default_voice_options()
        if options:
            self._voice_options = self.merge_options(options)
        logger.info(f"{self.display_name} TTS provider initialized")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @classmethod
    def is_configured_for(cls, settings: Settings) -> bool:
        """Return whether ``settings`` carry everything this provider needs."""
        return True

    def is_configured(self) -> bool:
        return self.is_configured_for(self._settings)

    @abstractmethod
    def default_voice_options(self) -> VoiceOptions:
        """Return the provider's default voice settings."""

    def get_voice_options(self) -> VoiceOptions:
        return self._voice_options

    def set_voice_options(self, options: Mapping[str, Any] | VoiceOptions) -> None:
        self._voice_options = self.merge_options(options)

    def merge_options(
        self, overrides: Mapping[str, Any] | VoiceOptions | None
    ) -> VoiceOptions:
        """Layer ``overrides`` over the instance defaults into a new value."""
        if overrides is None:
            return self._voice_options
        if isinstance(overrides, self.options_model):
            return overrides
        if isinstance(overrides, VoiceOptions):
            overrides = overrides.model_dump()
        merged = {**self._voice_options.model_dump(), **dict(overrides)}
        return self.options_model.model_validate(merged)

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    async def synthesize(
        self,
        text: str,
        options: Mapping[str, Any] | VoiceOptions | None = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> bytes:
        """
        Convert ``text`` to mp3 audio.

        Text longer than :attr:`max_text_length` is split into chunks which
        are synthesized concurrently and joined in their original order.

        Raises:
            ConfigurationError: The provider is missing its credential.
            ProviderTransportError: Any chunk's remote call failed.
            SynthesisCancelled: ``cancel`` fired before completion.
        """
        if not self.is_configured():
            raise ConfigurationError(
                self.name, f"{self.display_name} API key not configured"
            )

        voice_options = self.merge_options(options)
        chunks = [chunk for chunk in chunk_text(text, self.max_text_length) if chunk.content]
        if not chunks:
            logger.warning(f"No speakable text for {self.display_name}, returning empty audio")
            return b""

        logger.info(f"Converting text to speech with {self.display_name}: {text[:50]}...")
        if len(chunks) > 1:
            logger.info(f"Text exceeds maximum length, split into {len(chunks)} chunks")

        audio_parts = await self._dispatch(chunks, voice_options, cancel)
        audio = b"".join(audio_parts)
        logger.info(f"Generated {len(audio)} bytes of audio data from {self.display_name}")
        return audio

    async def _dispatch(
        self,
        chunks: Sequence[TextChunk],
        voice_options: VoiceOptions,
        cancel: Optional[CancellationToken],
    ) -> List[bytes]:
        """Run one remote call per chunk concurrently, results in chunk order."""
        tasks: list[asyncio.Task[bytes]] = []
        try:
            for chunk in chunks:
                if cancel is not None:
                    cancel.raise_if_cancelled()
                tasks.append(
                    asyncio.create_task(
                        self._synthesize_chunk(chunk.content, voice_options),
                        name=f"{self.name}-chunk-{chunk.index}",
                    )
                )
                # Let earlier dispatches start before the next cancellation check
                await asyncio.sleep(0)

            gathered = asyncio.gather(*tasks)
            if cancel is None:
                return list(await gathered)
            return list(await cancel.run(gathered))
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
            raise

    @abstractmethod
    async def _synthesize_chunk(self, text: str, voice_options: VoiceOptions) -> bytes:
        """Synthesize a single chunk that fits the provider limit."""

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue a request with the configured timeout, mapping transport failures."""
        try:
            if self._http_client is not None:
                return await self._http_client.request(
                    method, url, timeout=self._timeout, **kwargs
                )
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderTransportError(
                self.name, f"{self.display_name} request timed out"
            ) from exc
        except httpx.RequestError as exc:
            raise ProviderTransportError(
                self.name, f"Network error contacting {self.display_name}: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Voices
    # ------------------------------------------------------------------

    @abstractmethod
    def fallback_voices(self) -> List[VoiceDescriptor]:
        """Fixed voice catalog used when no remote catalog is available."""

    async def _fetch_voices(self) -> List[VoiceDescriptor]:
        return self.fallback_voices()

    async def list_voices(self) -> List[VoiceDescriptor]:
        """Return the provider's voices, never failing."""
        try:
            return await self._fetch_voices()
        except VoiceCatalogUnavailable as exc:
            logger.warning(f"Error fetching {self.display_name} voices: {exc}")
            return self.fallback_voices()


__all__ = [
    "AUDIO_FORMAT",
    "AudioResult",
    "SynthesisRequest",
    "TTSProvider",
    "VoiceDescriptor",
    "VoiceOptions",
]
