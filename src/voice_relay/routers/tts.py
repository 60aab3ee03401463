"""HTTP routes for text-to-speech synthesis and voice discovery."""

from __future__ import annotations

import base64
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from ..schemas.tts import ProvidersResponse, TtsConfigResponse, TtsRequest, TtsResponse
from ..services.tts import (
    ConfigurationError,
    SynthesisOrchestrator,
    TTSError,
    UnsupportedProviderError,
    VoiceDescriptor,
)
from ..utils import sanitize_text

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tts", tags=["tts"])


def get_orchestrator(request: Request) -> SynthesisOrchestrator:
    orchestrator = getattr(request.app.state, "synthesis_orchestrator", None)
    if orchestrator is None:  # pragma: no cover
        raise RuntimeError("Synthesis orchestrator is not configured")
    return orchestrator


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(
    orchestrator: SynthesisOrchestrator = Depends(get_orchestrator),
) -> ProvidersResponse:
    return ProvidersResponse(
        providers=orchestrator.get_available_providers(),
        default=orchestrator.registry.resolve().name,
    )


@router.get("/voices", response_model=List[VoiceDescriptor])
async def list_voices(
    provider: Optional[str] = Query(default=None),
    orchestrator: SynthesisOrchestrator = Depends(get_orchestrator),
) -> List[VoiceDescriptor]:
    try:
        return await orchestrator.list_voices(provider)
    except UnsupportedProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/config", response_model=TtsConfigResponse)
async def get_tts_config(
    orchestrator: SynthesisOrchestrator = Depends(get_orchestrator),
) -> TtsConfigResponse:
    provider = orchestrator.registry.resolve()
    voices = await provider.list_voices()
    return TtsConfigResponse(
        provider=provider.name,
        providers=orchestrator.get_available_providers(),
        voices=voices,
        default_voice=provider.get_voice_options().model_dump().get("voice", ""),
    )


@router.post("", response_model=TtsResponse)
async def synthesize(
    payload: TtsRequest,
    orchestrator: SynthesisOrchestrator = Depends(get_orchestrator),
) -> TtsResponse:
    text = sanitize_text(payload.text)
    if not text:
        raise HTTPException(status_code=422, detail="Missing required parameter: text")

    logger.info(f"TTS request: provider={payload.provider or 'default'} text={text[:50]}...")

    try:
        result = await orchestrator.synthesize_text(
            text, payload.provider, payload.voice_options
        )
    except UnsupportedProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(
            status_code=422, detail=exc.errors(include_url=False, include_context=False)
        )
    except TTSError as exc:
        message = orchestrator.failure_message(payload.provider, exc)
        logger.error(message)
        raise HTTPException(status_code=502, detail=message)

    return TtsResponse(
        request_id=str(uuid.uuid4()),
        audio=base64.b64encode(result.audio).decode("ascii"),
        format=result.format,
        provider=result.provider,
        voice_options=dict(result.voice_options),
    )


__all__ = ["get_orchestrator", "router"]
