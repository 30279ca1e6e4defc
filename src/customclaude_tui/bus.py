"""EventBus: fan-out of domain events to independent consumers.

Each subscriber owns a bounded queue. ``publish`` never blocks: when a
subscriber's queue is full the event is dropped for that subscriber only.
The UI sink is separate and receives every event, in publish order.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .agent.events import DomainEvent, EventKind

logger = logging.getLogger(__name__)

# Per-kind queue sizes used by the dashboard's background consumers.
DEFAULT_CAPACITIES: dict[EventKind, int] = {
    EventKind.SESSION_INIT: 10,
    EventKind.SESSION_UPDATE: 10,
    EventKind.MESSAGE_RECEIVED: 50,
    EventKind.TOOL_ACTIVITY: 20,
    EventKind.ERROR: 20,
    EventKind.STATS_UPDATE: 10,
}

_CLOSED = object()


class Subscription:
    """Read-only, bounded event source for one subscriber.

    Iterate with ``async for``; iteration ends once the bus shuts down.
    """

    def __init__(self, kind: EventKind, capacity: int) -> None:
        self.kind = kind
        self.capacity = max(1, int(capacity))
        self.dropped = 0
        # Unbounded underneath so the close marker always fits; capacity is
        # enforced in offer().
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        size = self._queue.qsize()
        return size - 1 if self._closed and size else size

    def offer(self, event: DomainEvent) -> bool:
        if self._closed:
            return False
        if self._queue.qsize() >= self.capacity:
            self.dropped += 1
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def get(self) -> DomainEvent | None:
        """Next event, or None at end-of-stream."""
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any other reader.
            self._queue.put_nowait(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> DomainEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event


class EventBus:
    def __init__(self) -> None:
        self._subscribers: dict[EventKind, list[Subscription]] = {}
        self._sink: Callable[[DomainEvent], None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._shutdown = asyncio.Event()

    @property
    def is_shut_down(self) -> bool:
        return self._shutdown.is_set()

    def subscribe(self, kind: EventKind, capacity: int) -> Subscription:
        subscription = Subscription(kind, capacity)
        if self.is_shut_down:
            subscription.close()
            return subscription
        self._subscribers.setdefault(kind, []).append(subscription)
        return subscription

    def attach_sink(self, sink: Callable[[DomainEvent], None]) -> None:
        """Install the UI sink. It is called synchronously for every event."""
        self._sink = sink

    def publish(self, event: DomainEvent) -> None:
        if self.is_shut_down:
            logger.debug("Event %s published after shutdown; ignored", event.kind.value)
            return
        for subscription in self._subscribers.get(event.kind, ()):
            if not subscription.offer(event):
                logger.debug(
                    "Subscriber queue full for %s; event dropped (%d so far)",
                    event.kind.value,
                    subscription.dropped,
                )
        if self._sink is not None:
            self._sink(event)

    def consume(
        self,
        kind: EventKind,
        handler: Callable[[DomainEvent], Awaitable[None] | None],
        capacity: int | None = None,
    ) -> asyncio.Task[None]:
        """Subscribe and run a delivery task feeding ``handler``.

        Must be called from a running event loop. The task is cancelled on
        shutdown.
        """
        subscription = self.subscribe(kind, capacity or DEFAULT_CAPACITIES.get(kind, 10))
        task = asyncio.create_task(self._deliver(subscription, handler))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(
        self,
        subscription: Subscription,
        handler: Callable[[DomainEvent], Awaitable[None] | None],
    ) -> None:
        async for event in subscription:
            try:
                result = handler(event)
                if result is not None:
                    await result
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001
                logger.exception("Event handler failed for %s", event.kind.value)

    def shutdown(self) -> None:
        """Stop delivery and close every subscriber queue. Safe to call twice."""
        if self.is_shut_down:
            return
        self._shutdown.set()
        for task in list(self._tasks):
            task.cancel()
        for subscriptions in self._subscribers.values():
            for subscription in subscriptions:
                subscription.close()
        self._subscribers = {}
        self._sink = None
        logger.info("Event bus shut down")
