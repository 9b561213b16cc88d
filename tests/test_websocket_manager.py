# =============================================================================
# tests/test_websocket_manager.py - WebSocket Connection Manager Tests
# =============================================================================

from unittest.mock import AsyncMock

import pytest

from app.websocket.manager import ConnectionManager, snapshot_message
from core.models import AuthState, SessionSnapshot
from tests.fakes import settle


def fake_socket(fail=False):
    websocket = AsyncMock()
    if fail:
        websocket.send_json.side_effect = RuntimeError("connection closed")
    return websocket


class TestConnectionManager:
    """Tests for ConnectionManager."""

    def test_snapshot_message(self):
        message = snapshot_message(SessionSnapshot(state=AuthState.UNAUTHENTICATED, is_loading=False))

        assert message["type"] == "session_state"
        assert message["state"] == "unauthenticated"
        assert message["profile_loaded"] is False

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self):
        manager = ConnectionManager()
        websocket = fake_socket()

        await manager.connect(websocket)
        assert manager.get_connection_count() == 1
        websocket.accept.assert_awaited_once()

        manager.disconnect(websocket)
        manager.disconnect(websocket)
        assert manager.get_connection_count() == 0

    @pytest.mark.asyncio
    async def test_broadcast_drops_dead_connections(self):
        manager = ConnectionManager()
        alive, dead = fake_socket(), fake_socket(fail=True)
        await manager.connect(alive)
        await manager.connect(dead)

        sent = await manager.broadcast({"type": "session_state"})

        assert sent == 1
        assert manager.connections == {alive}

    @pytest.mark.asyncio
    async def test_publish_snapshot_sends_to_clients(self):
        manager = ConnectionManager()
        websocket = fake_socket()
        await manager.connect(websocket)

        manager.publish_snapshot(SessionSnapshot(state=AuthState.AUTHENTICATED, is_loading=False))
        await settle()

        message = websocket.send_json.await_args.args[0]
        assert message["state"] == "authenticated"

    def test_publish_without_clients_is_noop(self):
        # No running loop needed when nobody is connected
        ConnectionManager().publish_snapshot(SessionSnapshot())
