"""
SnapshotBroadcast — fan-out of record snapshots to any number of listeners.

Every published snapshot is copied once and pushed into each subscriber's
own unbounded queue with ``put_nowait``, so publishing never waits on a
slow reader. A new subscriber is primed with the most recent snapshot, if
one has been published, and then sees every later one.

Usage::

    broadcast = SnapshotBroadcast()
    async with broadcast.subscribe(transform=sorted) as feed:
        async for people in feed:
            render(people)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Wakes a reader blocked in __anext__ when its subscription is closed.
_CLOSED = object()


class Subscription(Generic[T]):
    """
    A live, never-ending async iterator of snapshots.

    Registered with the broadcast as soon as it is created, so nothing
    published after ``subscribe()`` returns can be missed. Iteration stops
    only after :meth:`close`.
    """

    def __init__(
        self,
        broadcast: SnapshotBroadcast[T],
        transform: Callable[[Iterable[T]], list[T]] | None = None,
    ) -> None:
        self._broadcast = broadcast
        self._transform = transform
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self._pending = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Snapshots delivered to this subscription but not yet read."""
        return self._pending

    def _deliver(self, snapshot: tuple[T, ...]) -> None:
        if not self._closed:
            self._queue.put_nowait(snapshot)
            self._pending += 1

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._broadcast._unsubscribe(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> list[T]:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        self._pending -= 1
        if self._transform is not None:
            return self._transform(item)  # type: ignore[arg-type]
        return list(item)  # type: ignore[call-overload]

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class SnapshotBroadcast(Generic[T]):
    """Holds the live subscriptions and the latest published snapshot."""

    def __init__(self) -> None:
        self._subscribers: list[Subscription[T]] = []
        self._latest: tuple[T, ...] | None = None

    @property
    def latest(self) -> list[T] | None:
        return None if self._latest is None else list(self._latest)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, snapshot: Iterable[T]) -> None:
        """Record *snapshot* as latest and hand it to every subscriber."""
        frozen = tuple(snapshot)
        self._latest = frozen
        for sub in list(self._subscribers):
            sub._deliver(frozen)
        logger.debug(
            "Published snapshot of %d item(s) to %d subscriber(s)",
            len(frozen),
            len(self._subscribers),
        )

    def subscribe(
        self, transform: Callable[[Iterable[T]], list[T]] | None = None
    ) -> Subscription[T]:
        """Register a new subscription, primed with the latest snapshot if any."""
        sub: Subscription[T] = Subscription(self, transform)
        if self._latest is not None:
            sub._deliver(self._latest)
        self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription[T]) -> None:
        try:
            self._subscribers.remove(sub)
        except ValueError:
            pass
