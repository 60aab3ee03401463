import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import WebSocket

from voice_relay.services.tts import CancellationToken

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class VoiceSession:
    """Tracks the state of a single WebSocket client connection."""

    client_id: str
    websocket: WebSocket
    connected_at: datetime = field(default_factory=_utcnow)
    last_activity: datetime = field(default_factory=_utcnow)
    active_task: Optional[asyncio.Task] = None
    active_message_id: Optional[str] = None
    cancel_token: Optional[CancellationToken] = None

    def update_activity(self):
        """Update the last activity timestamp."""
        self.last_activity = _utcnow()

    @property
    def is_synthesizing(self) -> bool:
        return self.active_task is not None and not self.active_task.done()

    def begin_synthesis(self, task: asyncio.Task, token: CancellationToken, message_id: str):
        self.active_task = task
        self.cancel_token = token
        self.active_message_id = message_id

    def cancel_synthesis(self, reason: str = "Cancelled by client") -> Optional[str]:
        """Cancel the in-flight synthesis, returning its message id if any."""
        if not self.is_synthesizing:
            return None
        if self.cancel_token is not None:
            self.cancel_token.cancel(reason)
        return self.active_message_id


class VoiceConnectionManager:
    """Manages active WebSocket connections and their sessions."""

    def __init__(self):
        self.active_connections: Dict[str, VoiceSession] = {}

    async def connect(self, websocket: WebSocket, client_id: str) -> VoiceSession:
        """Accept a new WebSocket connection and create a session."""
        await websocket.accept()
        session = VoiceSession(client_id=client_id, websocket=websocket)
        self.active_connections[client_id] = session
        logger.info(f"Client connected: {client_id}")
        return session

    def disconnect(self, client_id: str):
        """Remove a client session, cancelling any synthesis it started."""
        session = self.active_connections.pop(client_id, None)
        if session is None:
            return
        session.cancel_synthesis("Client disconnected")
        if session.active_task is not None and not session.active_task.done():
            session.active_task.cancel()
        now = _utcnow()
        logger.info(
            f"Client disconnected: {client_id} "
            f"(connected {(now - session.connected_at).total_seconds():.1f}s, "
            f"idle {(now - session.last_activity).total_seconds():.1f}s)"
        )

    async def send_message(self, client_id: str, message: Dict[str, Any]):
        """Send a JSON message to a specific client."""
        session = self.active_connections.get(client_id)
        if session:
            try:
                await session.websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Error sending to {client_id}: {e}")
                self.disconnect(client_id)

    async def close_all(self):
        """Cancel outstanding synthesis for every client. Call on shutdown."""
        for client_id in list(self.active_connections):
            self.disconnect(client_id)
