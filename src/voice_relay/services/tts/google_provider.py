"""Google Translate TTS provider (free, no credential)."""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import AliasChoices, Field

from .base import TTSProvider, VoiceDescriptor, VoiceOptions
from .errors import ProviderTransportError

logger = logging.getLogger(__name__)

# Simplified catalog; the translate endpoint accepts many more languages
GOOGLE_VOICES = [
    VoiceDescriptor(id="en-US", name="English (US)", language="en", provider="google"),
    VoiceDescriptor(id="en-GB", name="English (UK)", language="en", provider="google"),
    VoiceDescriptor(id="es-ES", name="Spanish", language="es", provider="google"),
    VoiceDescriptor(id="fr-FR", name="French", language="fr", provider="google"),
    VoiceDescriptor(id="de-DE", name="German", language="de", provider="google"),
    VoiceDescriptor(id="it-IT", name="Italian", language="it", provider="google"),
    VoiceDescriptor(id="ja-JP", name="Japanese", language="ja", provider="google"),
    VoiceDescriptor(id="ko-KR", name="Korean", language="ko", provider="google"),
    VoiceDescriptor(id="pt-BR", name="Portuguese (Brazil)", language="pt", provider="google"),
    VoiceDescriptor(id="ru-RU", name="Russian", language="ru", provider="google"),
    VoiceDescriptor(id="zh-CN", name="Chinese (Simplified)", language="zh-CN", provider="google"),
]

_VOICE_LANGUAGES = {voice.id.lower(): voice.language for voice in GOOGLE_VOICES}

# ttsspeed values used by the translate web player
_NORMAL_SPEED = "1"
_SLOW_SPEED = "0.24"


class GoogleVoiceOptions(VoiceOptions):
    voice: str = Field(default="en-US", validation_alias=AliasChoices("voiceId", "voice"))
    language: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("lang", "language")
    )
    slow: bool = False
    # Accepted for client compatibility; the endpoint only honours ``slow``
    pitch: float = Field(default=1.0, ge=0.5, le=2.0)
    rate: float = Field(default=1.0, ge=0.5, le=2.0)

    def target_language(self) -> str:
        """Language code sent as ``tl``: explicit language, else the voice's."""
        if self.language:
            return self.language
        return _VOICE_LANGUAGES.get(self.voice.lower(), self.voice)


class GoogleTTSProvider(TTSProvider):
    """Synthesizes speech through the unauthenticated translate_tts endpoint."""

    name = "google"
    display_name = "Google TTS"
    max_text_length = 200  # translate_tts limit per request
    options_model = GoogleVoiceOptions

    def default_voice_options(self) -> GoogleVoiceOptions:
        return GoogleVoiceOptions(language=self._settings.google_tts_language)

    @property
    def audio_url(self) -> str:
        return f"{str(self._settings.google_tts_host).rstrip('/')}/translate_tts"

    def build_params(self, text: str, voice_options: GoogleVoiceOptions) -> dict[str, str]:
        return {
            "ie": "UTF-8",
            "q": text,
            "tl": voice_options.target_language(),
            "total": "1",
            "idx": "0",
            "textlen": str(len(text)),
            "client": "tw-ob",
            "prev": "input",
            "ttsspeed": _SLOW_SPEED if voice_options.slow else _NORMAL_SPEED,
        }

    async def _synthesize_chunk(  # type: ignore[override]
        self, text: str, voice_options: GoogleVoiceOptions
    ) -> bytes:
        response = await self._send(
            "GET", self.audio_url, params=self.build_params(text, voice_options)
        )
        if response.status_code != 200:
            raise ProviderTransportError(
                self.name,
                f"Failed to fetch audio: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        if not response.content:
            raise ProviderTransportError(
                self.name, "Failed to fetch audio: empty response body"
            )
        logger.debug(f"Google TTS returned {len(response.content)} bytes for chunk: {text[:50]}...")
        return response.content

    def fallback_voices(self) -> List[VoiceDescriptor]:
        return list(GOOGLE_VOICES)


__all__ = ["GOOGLE_VOICES", "GoogleTTSProvider", "GoogleVoiceOptions"]
