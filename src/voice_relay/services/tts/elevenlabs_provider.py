"""ElevenLabs TTS provider (commercial, requires an API key)."""

from __future__ import annotations

import json
import logging
from typing import Any, List

from pydantic import AliasChoices, Field

from voice_relay.config import Settings

from .base import TTSProvider, VoiceDescriptor, VoiceOptions
from .errors import ProviderTransportError, VoiceCatalogUnavailable

logger = logging.getLogger(__name__)

# Pre-made voices returned when the remote catalog cannot be read
ELEVENLABS_FALLBACK_VOICES = [
    VoiceDescriptor(id="21m00Tcm4TlvDq8ikWAM", name="Rachel", language="en", provider="elevenlabs", gender="female"),
    VoiceDescriptor(id="AZnzlk1XvdvUeBnXmlld", name="Domi", language="en", provider="elevenlabs", gender="female"),
    VoiceDescriptor(id="EXAVITQu4vr4xnSDxMaL", name="Bella", language="en", provider="elevenlabs", gender="female"),
    VoiceDescriptor(id="ErXwobaYiN019PkySvjV", name="Antoni", language="en", provider="elevenlabs", gender="male"),
    VoiceDescriptor(id="MF3mGyEYCl7XYWbV9V6O", name="Elli", language="en", provider="elevenlabs", gender="female"),
    VoiceDescriptor(id="TxGEqnHWrfWFTfGW9XjX", name="Josh", language="en", provider="elevenlabs", gender="male"),
    VoiceDescriptor(id="VR6AewLTigWG4xSOukaG", name="Arnold", language="en", provider="elevenlabs", gender="male"),
    VoiceDescriptor(id="pNInz6obpgDQGcFmaJgB", name="Adam", language="en", provider="elevenlabs", gender="male"),
    VoiceDescriptor(id="yoZ06aMxZJJ28mfd3POQ", name="Sam", language="en", provider="elevenlabs", gender="male"),
]


class ElevenLabsVoiceOptions(VoiceOptions):
    # camelCase aliases come first so client overrides win over merged defaults
    voice: str = Field(
        default="21m00Tcm4TlvDq8ikWAM",
        validation_alias=AliasChoices("voiceId", "voice_id", "voice"),
    )
    model_id: str = Field(
        default="eleven_multilingual_v2",
        validation_alias=AliasChoices("modelId", "model_id"),
    )
    stability: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_boost: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("similarityBoost", "similarity_boost"),
    )


class ElevenLabsTTSProvider(TTSProvider):
    """Synthesizes speech through the ElevenLabs text-to-speech API."""

    name = "elevenlabs"
    display_name = "Eleven Labs"
    max_text_length = 5000
    options_model = ElevenLabsVoiceOptions

    @classmethod
    def is_configured_for(cls, settings: Settings) -> bool:
        return settings.elevenlabs_key is not None

    def default_voice_options(self) -> ElevenLabsVoiceOptions:
        return ElevenLabsVoiceOptions(
            voice=self._settings.elevenlabs_default_voice,
            model_id=self._settings.elevenlabs_model_id,
        )

    @property
    def base_url(self) -> str:
        return str(self._settings.elevenlabs_base_url).rstrip("/")

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "xi-api-key": self._settings.elevenlabs_key or "",
            "Content-Type": "application/json",
            "Accept": accept,
        }

    async def _synthesize_chunk(  # type: ignore[override]
        self, text: str, voice_options: ElevenLabsVoiceOptions
    ) -> bytes:
        url = f"{self.base_url}/text-to-speech/{voice_options.voice}"
        payload = {
            "text": text,
            "model_id": voice_options.model_id,
            "voice_settings": {
                "stability": voice_options.stability,
                "similarity_boost": voice_options.similarity_boost,
            },
        }

        response = await self._send(
            "POST", url, headers=self._headers("audio/mpeg"), json=payload
        )
        if response.status_code != 200:
            error_body = _parse_error_body(response.content)
            raise ProviderTransportError(
                self.name,
                f"Eleven Labs API error: {response.status_code} "
                f"{response.reason_phrase} {json.dumps(error_body)}",
                status_code=response.status_code,
                detail=error_body,
            )
        if not response.content:
            raise ProviderTransportError(
                self.name, "Eleven Labs API returned an empty audio body"
            )
        return response.content

    async def _fetch_voices(self) -> List[VoiceDescriptor]:
        if not self.is_configured():
            return self.fallback_voices()

        try:
            response = await self._send(
                "GET", f"{self.base_url}/voices", headers=self._headers("application/json")
            )
        except ProviderTransportError as exc:
            raise VoiceCatalogUnavailable(self.name, str(exc)) from exc

        if response.status_code != 200:
            raise VoiceCatalogUnavailable(
                self.name,
                f"Failed to fetch voices: {response.status_code} {response.reason_phrase}",
            )

        try:
            voices = response.json()["voices"]
            return [self._to_descriptor(voice) for voice in voices]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise VoiceCatalogUnavailable(
                self.name, f"Malformed voice catalog: {exc}"
            ) from exc

    def _to_descriptor(self, voice: dict[str, Any]) -> VoiceDescriptor:
        labels = voice.get("labels") or {}
        return VoiceDescriptor(
            id=voice["voice_id"],
            name=voice["name"],
            # Voices are multilingual; the catalog only labels accents
            language=labels.get("language") or "en",
            provider=self.name,
            gender=labels.get("gender") or "unknown",
            preview_url=voice.get("preview_url"),
        )

    def fallback_voices(self) -> List[VoiceDescriptor]:
        return list(ELEVENLABS_FALLBACK_VOICES)


def _parse_error_body(content: bytes) -> Any:
    try:
        return json.loads(content)
    except ValueError:
        return {}


__all__ = [
    "ELEVENLABS_FALLBACK_VOICES",
    "ElevenLabsTTSProvider",
    "ElevenLabsVoiceOptions",
]
