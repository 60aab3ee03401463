"""Request/response schemas for the TTS HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field

from voice_relay.services.tts import VoiceDescriptor


class TtsRequest(BaseModel):
    """Text-to-speech request body."""

    text: str = Field(..., min_length=1, description="Text to synthesize.")
    provider: Optional[str] = Field(
        default=None,
        description="Provider name ('google' or 'elevenlabs'). Defaults to the server default.",
    )
    voice_options: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("voice_options", "voiceOptions", "options"),
        description="Provider-specific knobs such as voice, stability or slow.",
    )


class TtsResponse(BaseModel):
    """Synthesized audio, base64-encoded."""

    request_id: str
    audio: str = Field(..., description="Base64-encoded audio bytes.")
    format: str = "mp3"
    provider: str
    voice_options: Dict[str, Any] = Field(default_factory=dict)


class ProvidersResponse(BaseModel):
    providers: List[str]
    default: str


class TtsConfigResponse(BaseModel):
    """Configuration options advertised to clients."""

    provider: str
    providers: List[str]
    voices: List[VoiceDescriptor]
    default_voice: str
    formats: List[str] = Field(default_factory=lambda: ["mp3"])
    streaming: bool = False
    rate_min: float = 0.5
    rate_max: float = 2.0
    rate_default: float = 1.0
    pitch_min: float = 0.5
    pitch_max: float = 2.0
    pitch_default: float = 1.0


class RegistrationRequest(BaseModel):
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_version: Optional[str] = None


__all__ = [
    "ProvidersResponse",
    "RegistrationRequest",
    "TtsConfigResponse",
    "TtsRequest",
    "TtsResponse",
]
