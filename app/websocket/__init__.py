# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Pushes session state changes to connected web clients.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   unwatch = controller.watch(websocket_manager.publish_snapshot)
# =============================================================================

from app.websocket.manager import (
    SESSION_STATE_EVENT,
    ConnectionManager,
    snapshot_message,
    websocket_manager,
)

__all__ = [
    "SESSION_STATE_EVENT",
    "ConnectionManager",
    "snapshot_message",
    "websocket_manager",
]
