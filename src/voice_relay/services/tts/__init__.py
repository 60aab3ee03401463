"""
TTS (Text-to-Speech) Services Package.

This package relays synthesis requests to third-party providers:

- text_chunker: Splits text into provider-sized chunks at natural boundaries
- base: Provider contract, voice/options/result types, concurrent dispatch
- google_provider / elevenlabs_provider: Concrete providers
- registry: Resolves provider names to configured adapters
- orchestrator: Request-level entry point used by the routers

Architecture Overview:

    ┌─────────────┐     ┌──────────────────┐     ┌──────────────┐
    │ HTTP / WS   │────▶│ Orchestrator     │────▶│ Registry     │
    └─────────────┘     └──────────────────┘     └──────────────┘
                                 │                       │
                                 ▼                       ▼
                        ┌──────────────────┐     ┌──────────────┐
                        │ TextChunker      │◀────│ TTSProvider  │
                        └──────────────────┘     └──────────────┘
                                                         │
                                          one request per chunk, concurrent
                                                         ▼
                                                 ┌──────────────┐
                                                 │ mp3 bytes in │
                                                 │ chunk order  │
                                                 └──────────────┘
"""

from .base import AudioResult, SynthesisRequest, TTSProvider, VoiceDescriptor, VoiceOptions
from .cancellation import CancellationToken
from .elevenlabs_provider import ElevenLabsTTSProvider, ElevenLabsVoiceOptions
from .errors import (
    ChunkingError,
    ConfigurationError,
    ProviderError,
    ProviderTransportError,
    SynthesisCancelled,
    TTSError,
    UnsupportedProviderError,
    VoiceCatalogUnavailable,
)
from .google_provider import GoogleTTSProvider, GoogleVoiceOptions
from .orchestrator import SynthesisOrchestrator
from .registry import FREE_PROVIDER, ProviderRegistry
from .text_chunker import TextChunk, chunk_text, iter_chunks

__all__ = [
    "AudioResult",
    "CancellationToken",
    "ChunkingError",
    "ConfigurationError",
    "ElevenLabsTTSProvider",
    "ElevenLabsVoiceOptions",
    "FREE_PROVIDER",
    "GoogleTTSProvider",
    "GoogleVoiceOptions",
    "ProviderError",
    "ProviderRegistry",
    "ProviderTransportError",
    "SynthesisCancelled",
    "SynthesisOrchestrator",
    "SynthesisRequest",
    "TTSError",
    "TTSProvider",
    "TextChunk",
    "UnsupportedProviderError",
    "VoiceCatalogUnavailable",
    "VoiceDescriptor",
    "VoiceOptions",
    "chunk_text",
    "iter_chunks",
]
