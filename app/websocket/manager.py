# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Keeps the connected web clients and pushes every session snapshot to them.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   # Connect a client
#   await websocket_manager.connect(websocket)
#
#   # Push controller changes to all clients
#   unwatch = controller.watch(websocket_manager.publish_snapshot)
#
#   # Disconnect a client
#   websocket_manager.disconnect(websocket)
# =============================================================================

import asyncio
import logging
from typing import Set

from fastapi import WebSocket

from core.models import SessionSnapshot

logger = logging.getLogger(__name__)

SESSION_STATE_EVENT = "session_state"


def snapshot_message(snapshot: SessionSnapshot) -> dict:
    """Wrap a snapshot in the message envelope sent over the socket."""
    return {"type": SESSION_STATE_EVENT, **snapshot.to_payload()}


class ConnectionManager:
    """
    Manages WebSocket connections watching the session state.

    Several clients can watch at once (e.g., multiple browser tabs); each
    state change is sent to all of them.
    """

    def __init__(self):
        self.connections: Set[WebSocket] = set()
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection and track it."""
        await websocket.accept()
        self.connections.add(websocket)
        logger.info(f"WebSocket connected. Total connections: {len(self.connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from tracking."""
        self.connections.discard(websocket)
        logger.info(f"WebSocket disconnected. Total connections: {len(self.connections)}")

    async def broadcast(self, message: dict) -> int:
        """
        Send a message to every connected client.

        Returns:
            int: Number of clients the message was sent to
        """
        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in list(self.connections):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        for ws in dead_connections:
            self.connections.discard(ws)

        if dead_connections:
            logger.info(f"Cleaned up {len(dead_connections)} dead connections")

        logger.debug(f"Broadcast type={message.get('type')} to {sent_count} clients")
        return sent_count

    def publish_snapshot(self, snapshot: SessionSnapshot) -> None:
        """
        Controller observer: schedule a broadcast of the new snapshot.

        Observers are called synchronously, so the send runs as a task.
        """
        if not self.connections:
            return
        task = asyncio.get_running_loop().create_task(self.broadcast(snapshot_message(snapshot)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def get_connection_count(self) -> int:
        return len(self.connections)


# Global instance shared by the lifespan handler and the WebSocket route
websocket_manager = ConnectionManager()
