import asyncio
import base64
import json
import logging
import uuid
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from voice_relay.services.tts import (
    CancellationToken,
    SynthesisCancelled,
    SynthesisOrchestrator,
    TTSError,
)
from voice_relay.services.voice_session import VoiceConnectionManager, VoiceSession
from voice_relay.utils import sanitize_text

router = APIRouter(tags=["Voice"])
logger = logging.getLogger(__name__)


async def run_synthesis(
    manager: VoiceConnectionManager,
    orchestrator: SynthesisOrchestrator,
    client_id: str,
    data: Dict[str, Any],
    text: str,
    message_id: str,
    token: CancellationToken,
):
    """Synthesize one ``text`` frame and send the audio (or error) back."""
    provider = data.get("provider")
    voice_options = data.get("voice_options") or data.get("voiceOptions") or {}

    try:
        result = await orchestrator.synthesize_text(
            text, provider, voice_options, cancel=token
        )
    except SynthesisCancelled:
        logger.info(f"Synthesis {message_id} cancelled for {client_id}")
        return
    except ValidationError as e:
        await manager.send_message(client_id, {
            "type": "error",
            "message": f"Invalid voice options: {e.error_count()} error(s)",
            "messageId": message_id,
        })
        return
    except TTSError as e:
        message = orchestrator.failure_message(provider, e)
        logger.error(f"{message} (client {client_id})")
        await manager.send_message(client_id, {
            "type": "error",
            "message": message,
            "messageId": message_id,
        })
        return
    except Exception as e:
        logger.error(f"Synthesis {message_id} failed for {client_id}: {e}", exc_info=True)
        await manager.send_message(client_id, {
            "type": "error",
            "message": "Failed to process message",
            "messageId": message_id,
        })
        return

    await manager.send_message(client_id, {
        "type": "audio",
        "format": result.format,
        "data": base64.b64encode(result.audio).decode("utf-8"),
        "provider": result.provider,
        "messageId": message_id,
    })


async def handle_text(
    manager: VoiceConnectionManager,
    orchestrator: SynthesisOrchestrator,
    session: VoiceSession,
    data: Dict[str, Any],
):
    message_id = data.get("messageId") or str(uuid.uuid4())
    content = data.get("content")
    text = sanitize_text(content) if isinstance(content, str) else ""
    if not text:
        await manager.send_message(session.client_id, {
            "type": "error",
            "message": "Missing required field: content",
            "messageId": message_id,
        })
        return

    # A new request supersedes whatever the client was still waiting on
    superseded = session.cancel_synthesis("Superseded by a newer request")
    if superseded:
        logger.info(f"Request {superseded} superseded by {message_id} for {session.client_id}")
        await manager.send_message(session.client_id, {
            "type": "cancelled",
            "messageId": superseded,
        })

    token = CancellationToken()
    task = asyncio.create_task(
        run_synthesis(manager, orchestrator, session.client_id, data, text, message_id, token)
    )
    session.begin_synthesis(task, token, message_id)


async def handle_connection(
    websocket: WebSocket,
    client_id: str,
    manager: VoiceConnectionManager,
    orchestrator: SynthesisOrchestrator,
):
    """
    Main loop for handling a single client's WebSocket connection.

    Synthesis runs as a background task per request so that a ``cancel``
    frame can be received while audio is still being generated.
    """
    session = await manager.connect(websocket, client_id)
    await manager.send_message(client_id, {
        "type": "connection",
        "status": "connected",
        "clientId": client_id,
    })

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError("message must be a JSON object")
            except ValueError as e:
                logger.warning(f"Invalid message from {client_id}: {e}")
                await manager.send_message(client_id, {
                    "type": "error",
                    "message": "Failed to process message",
                })
                continue

            session.update_activity()
            event_type = data.get("type")
            logger.debug(f"Received {event_type} from {client_id}")

            if event_type == "text":
                await handle_text(manager, orchestrator, session, data)

            elif event_type == "cancel":
                message_id = session.cancel_synthesis()
                logger.info(f"Cancel requested by {client_id} (active: {message_id})")
                await manager.send_message(client_id, {
                    "type": "cancelled",
                    "messageId": message_id,
                })

            elif event_type == "heartbeat":
                await manager.send_message(client_id, {"type": "heartbeat"})

            else:
                await manager.send_message(client_id, {
                    "type": "error",
                    "message": "Unsupported message type",
                })

    except WebSocketDisconnect:
        logger.info(f"Client {client_id} disconnected")
    except Exception as e:
        logger.error(f"Unexpected error for {client_id}: {e}", exc_info=True)
    finally:
        manager.disconnect(client_id)


@router.websocket("/ws")
@router.websocket("/api/v1/ws")
async def voice_connect(websocket: WebSocket):
    client_id = websocket.query_params.get("client_id") or str(uuid.uuid4())

    app_state = websocket.app.state
    manager = getattr(app_state, "voice_manager", None)
    orchestrator = getattr(app_state, "synthesis_orchestrator", None)
    if manager is None or orchestrator is None:
        logger.error("Voice services not initialized")
        await websocket.close(code=1011, reason="Server not ready")
        return

    await handle_connection(websocket, client_id, manager, orchestrator)
