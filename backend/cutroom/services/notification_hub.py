"""Per-user publish/subscribe hub for job notifications.

One asyncio task owns the set of connected clients. Registration,
unregistration and fan-out are posted to that task as events, so the client set
is never touched from two places at once. The user -> subscribers index has
its own lock so lookups can be answered directly by any caller.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 256


class Subscriber:
    """One connected client with a bounded outbound buffer."""

    def __init__(self, user_id: str, buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.id = uuid4().hex
        self.user_id = user_id
        self._buffer: asyncio.Queue[str | None] = asyncio.Queue(maxsize=buffer_size)
        self._closed = False

    def __repr__(self) -> str:
        return f"<Subscriber {self.id} user={self.user_id}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, message: str) -> bool:
        """Buffer ``message`` without waiting. False if full or closed."""
        if self._closed:
            return False
        try:
            self._buffer.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        """Stop accepting messages and wake the reader."""
        if self._closed:
            return
        self._closed = True
        # Make room for the end marker; the client is going away anyway
        if self._buffer.full():
            self._buffer.get_nowait()
        self._buffer.put_nowait(None)

    async def next_message(self) -> str | None:
        """Wait for the next buffered message; None once closed and drained."""
        if self._closed and self._buffer.empty():
            return None
        return await self._buffer.get()


class UserIndex:
    """user_id -> subscribers, guarded by a lock. Lookups return snapshots."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_user: dict[str, set[Subscriber]] = {}

    def add(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._by_user.setdefault(subscriber.user_id, set()).add(subscriber)

    def remove(self, subscriber: Subscriber) -> bool:
        with self._lock:
            subscribers = self._by_user.get(subscriber.user_id)
            if not subscribers or subscriber not in subscribers:
                return False
            subscribers.discard(subscriber)
            if not subscribers:
                del self._by_user[subscriber.user_id]
            return True

    def get(self, user_id: str) -> list[Subscriber]:
        with self._lock:
            return list(self._by_user.get(user_id, ()))

    def user_count(self) -> int:
        with self._lock:
            return len(self._by_user)


class HubEventType(Enum):
    REGISTER = "register"
    UNREGISTER = "unregister"
    PUBLISH = "publish"
    BROADCAST = "broadcast"


@dataclass
class HubEvent:
    type: HubEventType
    subscriber: Subscriber | None = None
    user_id: str | None = None
    message: str | None = None


class NotificationHub:
    """Routes messages to the subscribers of a user."""

    def __init__(self):
        self._events: asyncio.Queue[HubEvent] = asyncio.Queue()
        self._clients: set[Subscriber] = set()
        self._index = UserIndex()
        self._task: asyncio.Task | None = None

    # Public API: every call only posts an event and returns immediately

    def register(self, subscriber: Subscriber) -> None:
        self._events.put_nowait(HubEvent(HubEventType.REGISTER, subscriber=subscriber))

    def unregister(self, subscriber: Subscriber) -> None:
        self._events.put_nowait(HubEvent(HubEventType.UNREGISTER, subscriber=subscriber))

    def publish_to_user(self, user_id: str, message: str) -> None:
        self._events.put_nowait(HubEvent(HubEventType.PUBLISH, user_id=user_id, message=message))

    def broadcast(self, message: str) -> None:
        self._events.put_nowait(HubEvent(HubEventType.BROADCAST, message=message))

    def subscribers_for(self, user_id: str) -> list[Subscriber]:
        return self._index.get(user_id)

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def drain(self) -> None:
        """Wait until every event posted so far has been handled."""
        await self._events.join()

    # Lifecycle

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="notification-hub")
        return self._task

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        for subscriber in list(self._clients):
            self._remove(subscriber)
        logger.info("[HUB] Stopped")

    async def run(self) -> None:
        logger.info("[HUB] Started")
        while True:
            event = await self._events.get()
            try:
                self._handle(event)
            except Exception:
                logger.exception(f"[HUB] Failed to handle {event.type.value} event")
            finally:
                self._events.task_done()

    def _handle(self, event: HubEvent) -> None:
        if event.type is HubEventType.REGISTER:
            self._clients.add(event.subscriber)
            self._index.add(event.subscriber)
            logger.info(f"[HUB] Client registered for user {event.subscriber.user_id}. Total: {len(self._clients)}")
        elif event.type is HubEventType.UNREGISTER:
            if event.subscriber in self._clients:
                self._remove(event.subscriber)
                logger.info(
                    f"[HUB] Client unregistered for user {event.subscriber.user_id}. Total: {len(self._clients)}"
                )
        elif event.type is HubEventType.PUBLISH:
            subscribers = self._index.get(event.user_id)
            if not subscribers:
                logger.debug(f"[HUB] No subscribers for user {event.user_id}")
                return
            self._deliver(subscribers, event.message)
        elif event.type is HubEventType.BROADCAST:
            self._deliver(list(self._clients), event.message)

    def _deliver(self, subscribers: list[Subscriber], message: str) -> None:
        for subscriber in subscribers:
            if not subscriber.enqueue(message):
                logger.warning(f"[HUB] Send buffer full for user {subscriber.user_id}, dropping client")
                self._remove(subscriber)

    def _remove(self, subscriber: Subscriber) -> None:
        self._clients.discard(subscriber)
        self._index.remove(subscriber)
        subscriber.close()
