"""Fan-out event streams for snapshot and favorites notifications.

A stream has a single writer (the owning store or coordinator) and any number
of subscribers. Each subscriber gets its own queue, so events reach one
subscriber in publish order regardless of how fast the others consume.
Subscribers only see events published after they subscribed.

Streams are bound to the event loop that owns the writer; ``publish`` must be
called from that loop's thread.
"""

import asyncio
import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """A single subscriber's view of an event stream.

    Iterate with ``async for`` or call ``get()``. When ``max_pending`` is set
    and the subscriber falls behind, the oldest pending events are dropped so
    the newest one is always delivered.
    """

    def __init__(self, stream: "EventStream[T]", max_pending: int | None = None) -> None:
        """Initialize the subscription.

        Args:
            stream: Stream this subscription is attached to
            max_pending: Maximum undelivered events to keep, None for unbounded
        """
        if max_pending is not None and max_pending < 1:
            raise ValueError("max_pending must be at least 1")

        self._stream = stream
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self.max_pending = max_pending
        self.dropped = 0
        self.closed = False

    @property
    def pending(self) -> int:
        """Number of events waiting to be consumed."""
        if self.closed:
            return max(0, self._queue.qsize() - 1)
        return self._queue.qsize()

    def _deliver(self, event: T) -> None:
        if self.closed:
            return
        if self.max_pending is not None:
            while self._queue.qsize() >= self.max_pending:
                self._queue.get_nowait()
                self.dropped += 1
        self._queue.put_nowait(event)

    async def get(self) -> T:
        """Wait for the next event.

        Raises:
            StopAsyncIteration: If the subscription was closed
        """
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    def get_nowait(self) -> T | None:
        """Return the next pending event, or None when nothing is pending."""
        if self._queue.empty():
            return None
        item = self._queue.get_nowait()
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Detach from the stream and wake up any waiting consumer."""
        if self.closed:
            return
        self.closed = True
        self._stream._unsubscribe(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        return await self.get()

    def __enter__(self) -> "Subscription[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class EventStream(Generic[T]):
    """Single-writer broadcast stream."""

    def __init__(self, name: str, max_pending: int | None = None) -> None:
        """Initialize the stream.

        Args:
            name: Stream name used in log messages
            max_pending: Default per-subscriber buffer limit, None for unbounded
        """
        self.name = name
        self.max_pending = max_pending
        self._subscriptions: list[Subscription[T]] = []

    @property
    def subscriber_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._subscriptions)

    def subscribe(self) -> Subscription[T]:
        """Attach a new subscriber that receives events published from now on."""
        subscription: Subscription[T] = Subscription(self, max_pending=self.max_pending)
        self._subscriptions.append(subscription)
        logger.debug(f"New subscriber on {self.name} stream ({self.subscriber_count} total)")
        return subscription

    def publish(self, event: T) -> None:
        """Deliver an event to every live subscriber."""
        for subscription in list(self._subscriptions):
            subscription._deliver(event)

    def close(self) -> None:
        """Close every subscription."""
        for subscription in list(self._subscriptions):
            subscription.close()

    def _unsubscribe(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
