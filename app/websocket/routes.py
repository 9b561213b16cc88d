# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# WebSocket endpoint for real-time session state.
#
# Connect: ws://host/ws/session
#
# Events:
#   - {"type": "session_state", "state": "...", "user": {...}, "profile": {...},
#      "is_loading": false, "profile_loaded": true}
#
# The first message is always the current snapshot; one more is sent after
# every change of the session controller.
# =============================================================================

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.auth.dependencies import SessionControllerDep
from app.websocket.manager import snapshot_message, websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/session")
async def session_websocket(
    websocket: WebSocket,
    controller: SessionControllerDep,
):
    """
    WebSocket endpoint for real-time session state.

    Sends the current snapshot on connect, then every change.
    Replies "pong" to "ping" for keepalive.
    """
    await websocket_manager.connect(websocket)

    try:
        await websocket.send_json(snapshot_message(controller.snapshot))

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    finally:
        websocket_manager.disconnect(websocket)


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection statistics.

    Returns:
        dict: Number of connected clients
    """
    return {"total_connections": websocket_manager.get_connection_count()}
