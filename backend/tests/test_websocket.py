"""Tests for the WebSocket notification adapter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocket

from cutroom.api.websocket import notifications_socket, pump_messages
from cutroom.services.notification_hub import NotificationHub, Subscriber


class TestPumpMessages:
    @pytest.mark.asyncio
    async def test_forwards_messages_then_closes(self):
        websocket = AsyncMock(spec=WebSocket)
        subscriber = Subscriber("u1")
        subscriber.enqueue("first")
        subscriber.enqueue("second")
        subscriber.close()

        await pump_messages(websocket, subscriber)

        assert [c.args[0] for c in websocket.send_text.call_args_list] == ["first", "second"]
        websocket.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_stops_when_client_is_gone(self):
        websocket = AsyncMock(spec=WebSocket)
        websocket.send_text.side_effect = RuntimeError("Connection closed")
        subscriber = Subscriber("u1")
        subscriber.enqueue("lost")

        await asyncio.wait_for(pump_messages(websocket, subscriber), timeout=1)

        websocket.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_waits_for_messages(self):
        websocket = AsyncMock(spec=WebSocket)
        subscriber = Subscriber("u1")
        pump = asyncio.create_task(pump_messages(websocket, subscriber))
        await asyncio.sleep(0)
        websocket.send_text.assert_not_called()

        subscriber.enqueue("late")
        subscriber.close()
        await asyncio.wait_for(pump, timeout=1)

        websocket.send_text.assert_called_once_with("late")


class TestNotificationsSocket:
    @staticmethod
    def _websocket(hub) -> AsyncMock:
        websocket = AsyncMock(spec=WebSocket)
        websocket.app = MagicMock()
        websocket.app.state.hub = hub
        websocket.app.state.settings.hub_send_buffer_size = 8
        return websocket

    @pytest.mark.asyncio
    async def test_failed_handshake_unregisters(self):
        hub = MagicMock(spec=NotificationHub)
        websocket = self._websocket(hub)
        websocket.accept.side_effect = ConnectionResetError("handshake aborted")

        with pytest.raises(ConnectionResetError):
            await notifications_socket(websocket, user_id="u1")

        subscriber = hub.register.call_args.args[0]
        hub.unregister.assert_called_once_with(subscriber)
        websocket.send_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_user_id_is_rejected(self):
        hub = MagicMock(spec=NotificationHub)
        websocket = self._websocket(hub)

        await notifications_socket(websocket, user_id=None)

        websocket.close.assert_called_once()
        hub.register.assert_not_called()
