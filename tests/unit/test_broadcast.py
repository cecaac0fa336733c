"""Unit tests for rolodex.core.store.broadcast — snapshot fan-out."""

from __future__ import annotations

import asyncio

import pytest

from rolodex.core.store.broadcast import SnapshotBroadcast


async def _next(feed):
    return await asyncio.wait_for(anext(feed), timeout=1.0)


class TestSubscribe:
    def test_no_snapshot_before_first_publish(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe()
        assert broadcast.latest is None
        assert feed.pending == 0
        assert broadcast.subscriber_count == 1

    @pytest.mark.asyncio
    async def test_late_subscriber_gets_latest(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        broadcast.publish([1])
        broadcast.publish([1, 2])
        feed = broadcast.subscribe()
        assert feed.pending == 1
        assert await _next(feed) == [1, 2]

    @pytest.mark.asyncio
    async def test_receives_every_later_snapshot(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe()
        broadcast.publish([1])
        broadcast.publish([1, 2])
        assert await _next(feed) == [1]
        assert await _next(feed) == [1, 2]

    @pytest.mark.asyncio
    async def test_transform_applied_at_delivery(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe(transform=sorted)
        broadcast.publish([3, 1, 2])
        assert await _next(feed) == [1, 2, 3]
        assert broadcast.latest == [3, 1, 2]


class TestFanOut:
    @pytest.mark.asyncio
    async def test_all_subscribers_receive(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feeds = [broadcast.subscribe() for _ in range(3)]
        broadcast.publish([42])
        for feed in feeds:
            assert await _next(feed) == [42]

    @pytest.mark.asyncio
    async def test_slow_subscriber_does_not_block_others(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        slow = broadcast.subscribe()
        fast = broadcast.subscribe()
        for i in range(100):
            broadcast.publish([i])
        assert slow.pending == 100
        for i in range(100):
            assert await _next(fast) == [i]

    @pytest.mark.asyncio
    async def test_snapshot_is_copied(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe()
        items = [1]
        broadcast.publish(items)
        items.append(2)
        assert await _next(feed) == [1]


class TestUnsubscribe:
    @pytest.mark.asyncio
    async def test_close_ends_iteration(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe()
        broadcast.publish([1])
        feed.close()
        received = [snapshot async for snapshot in feed]
        assert received == [[1]]
        assert broadcast.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_reader(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe()

        async def _reader():
            return await anext(feed, None)

        waiter = asyncio.create_task(_reader())
        await asyncio.sleep(0)
        feed.close()
        assert await asyncio.wait_for(waiter, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_closed_subscription_gets_nothing_more(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        async with broadcast.subscribe() as feed:
            pass
        broadcast.publish([1])
        assert feed.closed
        assert feed.pending == 0

    def test_double_close_is_harmless(self) -> None:
        broadcast: SnapshotBroadcast[int] = SnapshotBroadcast()
        feed = broadcast.subscribe()
        feed.close()
        feed.close()
        assert broadcast.subscriber_count == 0
