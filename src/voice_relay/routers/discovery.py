"""Service discovery and registration endpoints for the desktop client."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request

from .. import __version__
from ..schemas.tts import RegistrationRequest
from ..services.tts import SynthesisOrchestrator
from .tts import get_orchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["discovery"])

SERVICE_ID = "claude-voice-mcp"
SERVICE_NAME = "Claude Voice MCP"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/info")
async def service_info() -> dict[str, Any]:
    logger.info("MCP Info requested")
    return {
        "name": SERVICE_NAME,
        "version": __version__,
        "type": "voice",
        "capabilities": {"tts": True, "stt": False},
        "protocol_version": "1.0",
        "service_id": SERVICE_ID,
        "display_name": "Claude Voice Interface",
        "description": "MCP server providing voice capabilities for Claude Desktop",
        "supports_streaming": False,
    }


@router.get("/health")
async def service_health() -> dict[str, str]:
    return {"status": "healthy", "timestamp": _timestamp()}


@router.post("/register")
async def register_client(
    payload: RegistrationRequest,
    request: Request,
    orchestrator: SynthesisOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    logger.info(
        f"Registration request: client_id={payload.client_id} "
        f"name={payload.client_name} version={payload.client_version}"
    )

    host = request.headers.get("host") or request.url.netloc
    voices = await orchestrator.list_voices()
    return {
        "status": "registered",
        "session_id": str(uuid.uuid4()),
        "service_endpoints": {
            "websocket": f"ws://{host}/api/v1/ws",
            "rest": f"http://{host}/api/v1",
        },
        "capabilities": {
            "tts": {
                "providers": orchestrator.get_available_providers(),
                "voices": [voice.model_dump() for voice in voices],
                "formats": ["mp3"],
                "streaming": False,
            }
        },
    }


__all__ = ["router", "SERVICE_NAME"]
