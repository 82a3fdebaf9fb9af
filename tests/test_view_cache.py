"""View cache: refresh, stale-but-available, ordering, lifecycle."""

import asyncio

import pytest

from auctiondesk.cache.view_cache import AuctionViewCache, CacheEvent
from auctiondesk.errors import ReadError

from conftest import ControlledSource, ScriptedSource, make_snapshot


@pytest.mark.asyncio
async def test_not_loaded_until_first_refresh(snapshot):
    cache = AuctionViewCache(ScriptedSource(snapshot))
    assert cache.current() is None
    assert cache.is_stale
    assert await cache.force_refresh() == snapshot
    assert cache.current() == snapshot
    assert cache.last_refreshed_at is not None
    assert not cache.is_stale


@pytest.mark.asyncio
async def test_read_error_keeps_previous_snapshot(snapshot):
    source = ScriptedSource(snapshot, ReadError("node unreachable"))
    cache = AuctionViewCache(source)
    await cache.force_refresh()
    refreshed_at = cache.last_refreshed_at
    assert await cache.force_refresh() == snapshot
    assert cache.current() == snapshot
    assert cache.last_refreshed_at == refreshed_at
    assert isinstance(cache.last_error, ReadError)
    assert cache.is_stale


@pytest.mark.asyncio
async def test_success_clears_last_error(snapshot):
    later = make_snapshot(highest_bidder="0xuser", highest_bid=600_000_000)
    cache = AuctionViewCache(ScriptedSource(ReadError("timeout"), later))
    await cache.force_refresh()
    assert cache.current() is None
    assert cache.last_error is not None
    await cache.force_refresh()
    assert cache.current() == later
    assert cache.last_error is None


@pytest.mark.asyncio
async def test_late_older_result_does_not_overwrite_newer():
    source = ControlledSource()
    cache = AuctionViewCache(source)
    snap_a = make_snapshot(highest_bidder="0xa", highest_bid=600_000_000)
    snap_b = make_snapshot(highest_bidder="0xb", highest_bid=700_000_000)

    first = asyncio.create_task(cache.force_refresh())
    await asyncio.sleep(0)
    second = asyncio.create_task(cache.force_refresh())
    await asyncio.sleep(0)

    source.resolve(1, snap_b)
    await second
    source.resolve(0, snap_a)
    await first
    assert cache.current() == snap_b


@pytest.mark.asyncio
async def test_late_older_failure_is_ignored():
    source = ControlledSource()
    cache = AuctionViewCache(source)
    snap_b = make_snapshot()

    first = asyncio.create_task(cache.force_refresh())
    await asyncio.sleep(0)
    second = asyncio.create_task(cache.force_refresh())
    await asyncio.sleep(0)

    source.resolve(1, snap_b)
    await second
    source.resolve(0, ReadError("slow and broken"))
    await first
    assert cache.current() == snap_b
    assert cache.last_error is None


@pytest.mark.asyncio
async def test_stop_discards_in_flight_result_and_is_idempotent(snapshot):
    source = ControlledSource()
    cache = AuctionViewCache(source)
    pending = asyncio.create_task(cache.force_refresh())
    await asyncio.sleep(0)

    cache.stop()
    cache.stop()
    source.resolve(0, snapshot)
    await pending
    assert cache.current() is None
    # Refresh requests after stop do nothing
    assert await cache.force_refresh() is None
    assert len(source.pending) == 1


@pytest.mark.asyncio
async def test_start_polls_until_stopped(snapshot):
    source = ScriptedSource(snapshot)
    cache = AuctionViewCache(source)
    cache.start(poll_interval_sec=0.01)
    assert cache.running
    await asyncio.sleep(0.05)
    cache.stop()
    calls = source.calls
    assert calls >= 2
    assert cache.current() == snapshot
    assert not cache.running
    await asyncio.sleep(0.03)
    assert source.calls == calls


@pytest.mark.asyncio
async def test_start_twice_keeps_one_poller(snapshot):
    cache = AuctionViewCache(ScriptedSource(snapshot))
    cache.start(poll_interval_sec=5)
    task = cache._task
    cache.start(poll_interval_sec=1)
    assert cache._task is task
    assert cache.poll_interval_sec == 5
    cache.stop()


@pytest.mark.asyncio
async def test_poll_failure_keeps_polling(snapshot):
    source = ScriptedSource(snapshot, ReadError("hiccup"), snapshot)
    cache = AuctionViewCache(source)
    cache.start(poll_interval_sec=0.01)
    await asyncio.sleep(0.1)
    cache.stop()
    assert source.calls >= 3
    assert cache.current() == snapshot


@pytest.mark.asyncio
async def test_listeners_receive_events(snapshot):
    events: list[CacheEvent] = []
    cache = AuctionViewCache(ScriptedSource(snapshot, ReadError("down")))
    unsubscribe = cache.subscribe(events.append)
    await cache.force_refresh()
    await cache.force_refresh()
    unsubscribe()
    await cache.force_refresh()
    assert [e.kind for e in events] == ["updated", "refresh_failed"]
    assert events[1].snapshot == snapshot
    assert isinstance(events[1].error, ReadError)


@pytest.mark.asyncio
async def test_listener_error_does_not_break_refresh(snapshot):
    def broken(event: CacheEvent) -> None:
        raise RuntimeError("listener bug")

    cache = AuctionViewCache(ScriptedSource(snapshot))
    cache.subscribe(broken)
    await cache.force_refresh()
    assert cache.current() == snapshot


@pytest.mark.asyncio
async def test_stale_after_two_intervals(snapshot):
    now = [1000.0]
    cache = AuctionViewCache(ScriptedSource(snapshot), clock=lambda: now[0])
    await cache.force_refresh()
    assert not cache.is_stale
    now[0] += 2 * cache.poll_interval_sec + 1
    assert cache.is_stale


def test_start_rejects_bad_interval(snapshot):
    with pytest.raises(ValueError):
        AuctionViewCache(ScriptedSource(snapshot)).start(poll_interval_sec=0)
