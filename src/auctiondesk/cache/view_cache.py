"""Auction view cache - last known snapshot, background polling, stale-but-available on read errors."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from auctiondesk.errors import ReadError
from auctiondesk.ledger.base import SnapshotSource
from auctiondesk.models import AuctionSnapshot

log = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL_SEC = 10.0


@dataclass(frozen=True)
class CacheEvent:
    """Emitted to listeners after an applied refresh attempt."""

    kind: str  # "updated" | "refresh_failed"
    sequence: int
    snapshot: AuctionSnapshot | None
    error: ReadError | None = None


Listener = Callable[[CacheEvent], None]


class AuctionViewCache:
    """
    Holds the current AuctionSnapshot and keeps it fresh by polling a SnapshotSource.

    Every refresh attempt takes a sequence number and its result is applied only if no
    newer attempt was issued meanwhile. stop() bumps the sequence too, so nothing issued
    before it can land afterwards.
    """

    def __init__(self, source: SnapshotSource, *, clock: Callable[[], float] = time.time) -> None:
        self._source = source
        self._clock = clock
        self._snapshot: AuctionSnapshot | None = None
        self._last_refreshed_at: float | None = None
        self._last_error: ReadError | None = None
        self._poll_interval_sec = DEFAULT_POLL_INTERVAL_SEC
        self._issued = 0
        self._stopped = False
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[Listener] = []

    # --- read side ---
    def current(self) -> AuctionSnapshot | None:
        """Latest applied snapshot, or None when nothing has loaded yet."""
        return self._snapshot

    @property
    def last_refreshed_at(self) -> float | None:
        return self._last_refreshed_at

    @property
    def last_error(self) -> ReadError | None:
        return self._last_error

    @property
    def poll_interval_sec(self) -> float:
        return self._poll_interval_sec

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_stale(self) -> bool:
        if self._snapshot is None or self._last_refreshed_at is None:
            return True
        if self._last_error is not None:
            return True
        return self._clock() - self._last_refreshed_at > 2 * self._poll_interval_sec

    def get_status(self) -> dict[str, Any]:
        return {
            "loaded": self._snapshot is not None,
            "running": self.running,
            "stale": self.is_stale,
            "last_refreshed_at": self._last_refreshed_at,
            "last_error": str(self._last_error) if self._last_error else None,
            "poll_interval_sec": self._poll_interval_sec,
        }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener for CacheEvents. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- lifecycle ---
    def start(self, poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC) -> None:
        """Begin background polling on the running event loop. First refresh happens immediately."""
        if poll_interval_sec <= 0:
            raise ValueError(f"poll_interval_sec must be positive, got {poll_interval_sec}")
        if self.running:
            log.info("cache_already_running", interval_sec=self._poll_interval_sec)
            return
        self._poll_interval_sec = poll_interval_sec
        self._stopped = False
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())

    def stop(self) -> None:
        """Cancel polling. Safe to call repeatedly; no result issued before this call is applied."""
        was_running = self.running
        self._stopped = True
        self._issued += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if was_running:
            log.info("cache_polling_stopped")

    async def force_refresh(self) -> AuctionSnapshot | None:
        """Fetch now, outside the poll schedule. Returns the snapshot held afterwards."""
        if self._stopped:
            log.debug("refresh_skipped_stopped")
            return self._snapshot
        await self._refresh("forced")
        return self._snapshot

    # --- internals ---
    async def _poll_loop(self) -> None:
        interval = self._poll_interval_sec
        log.info("cache_polling_started", interval_sec=interval)
        while not self._stopped:
            try:
                await self._refresh("poll")
            except asyncio.CancelledError:
                log.debug("cache_poll_cancelled")
                break
            except Exception as e:
                log.error("cache_poll_error", error=str(e), exc_info=True)
            await asyncio.sleep(interval)

    def _may_apply(self, sequence: int) -> bool:
        return not self._stopped and sequence == self._issued

    async def _refresh(self, reason: str) -> bool:
        self._issued += 1
        sequence = self._issued
        try:
            snapshot = await self._source.fetch_snapshot()
        except ReadError as e:
            if not self._may_apply(sequence):
                log.debug("refresh_discarded", reason=reason, sequence=sequence, latest=self._issued)
                return False
            self._last_error = e
            # Stale-but-available: keep the previous snapshot, tell observers, no user notification
            log.warning("refresh_failed", reason=reason, sequence=sequence, error=str(e))
            self._emit(CacheEvent("refresh_failed", sequence, self._snapshot, e))
            return False
        if not self._may_apply(sequence):
            log.debug("refresh_discarded", reason=reason, sequence=sequence, latest=self._issued)
            return False
        self._snapshot = snapshot
        self._last_refreshed_at = self._clock()
        self._last_error = None
        log.debug("refresh_applied", reason=reason, sequence=sequence)
        self._emit(CacheEvent("updated", sequence, snapshot))
        return True

    def _emit(self, event: CacheEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                log.error("cache_listener_error", kind=event.kind, error=str(e))
