"""WebSocket endpoint that streams job notifications to their owner.

Each connection is adapted to a hub ``Subscriber``: a pump task forwards
buffered messages to the socket while the handler keeps reading, so a
client disconnect is noticed even when nothing is being sent.
"""

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from cutroom.services.notification_hub import NotificationHub, Subscriber

router = APIRouter()
logger = logging.getLogger(__name__)


async def pump_messages(websocket: WebSocket, subscriber: Subscriber) -> None:
    """Send the subscriber's messages until it is closed, then close the socket."""
    while True:
        message = await subscriber.next_message()
        if message is None:
            break
        try:
            await websocket.send_text(message)
        except Exception:
            # Client disconnected
            logger.info(f"[WS] Send failed for user {subscriber.user_id}, client gone")
            return

    try:
        await websocket.close()
    except RuntimeError:
        # Already closed by the client
        pass


@router.websocket("/ws")
async def notifications_socket(
    websocket: WebSocket,
    user_id: str | None = Query(default=None),
) -> None:
    if not user_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub: NotificationHub = websocket.app.state.hub
    subscriber = Subscriber(user_id, buffer_size=websocket.app.state.settings.hub_send_buffer_size)

    pump: asyncio.Task | None = None
    try:
        # Register before accepting so nothing published after the handshake is missed
        hub.register(subscriber)
        await websocket.accept()
        logger.info(f"[WS] Client connected for user {user_id}")

        pump = asyncio.create_task(pump_messages(websocket, subscriber))
        while True:
            # Incoming messages are ignored; reading detects disconnects
            await websocket.receive_text()
    except (WebSocketDisconnect, RuntimeError):
        pass
    finally:
        hub.unregister(subscriber)
        if pump is not None:
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
        logger.info(f"[WS] Client disconnected for user {user_id}")
