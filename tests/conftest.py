"""Shared fakes for ledger collaborators."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from auctiondesk.errors import ReadError, SigningRejected
from auctiondesk.models import AuctionSnapshot, EntryFunctionIntent, PendingTransaction, TransactionReceipt

MODULE = "0x100"


def make_snapshot(**overrides: Any) -> AuctionSnapshot:
    fields: dict[str, Any] = {
        "seller": "0xseller",
        "start_price": 500_000_000,
        "highest_bidder": None,
        "highest_bid": None,
        "end_time": 1_900_000_000,
        "ended": False,
        "media_url": "https://example.com/item.png",
    }
    fields.update(overrides)
    return AuctionSnapshot(**fields)


class ScriptedSource:
    """Returns (or raises) queued results in order; repeats the last one when exhausted."""

    def __init__(self, *results: AuctionSnapshot | Exception) -> None:
        self.results = list(results)
        self.calls = 0

    async def fetch_snapshot(self) -> AuctionSnapshot:
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class ControlledSource:
    """Each fetch blocks until the test resolves it, so completion order is up to the test."""

    def __init__(self) -> None:
        self.pending: list[asyncio.Future[AuctionSnapshot]] = []

    async def fetch_snapshot(self) -> AuctionSnapshot:
        fut: asyncio.Future[AuctionSnapshot] = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut

    def resolve(self, index: int, result: AuctionSnapshot | ReadError) -> None:
        if isinstance(result, Exception):
            self.pending[index].set_exception(result)
        else:
            self.pending[index].set_result(result)


class FakeSigner:
    def __init__(self, account: str | None = "0xuser", tx_hash: str = "0xabc", error: Exception | None = None) -> None:
        self._account = account
        self.tx_hash = tx_hash
        self.error = error
        self.intents: list[EntryFunctionIntent] = []

    @property
    def account(self) -> str | None:
        return self._account

    async def sign_and_submit(self, intent: EntryFunctionIntent) -> PendingTransaction:
        self.intents.append(intent)
        if self.error is not None:
            raise self.error
        return PendingTransaction(hash=self.tx_hash)


class FakeWatcher:
    def __init__(self, success: bool = True, vm_status: str = "Executed successfully", delay: float = 0.0) -> None:
        self.success = success
        self.vm_status = vm_status
        self.delay = delay
        self.waited: list[str] = []

    async def wait_for_transaction(self, tx_hash: str) -> TransactionReceipt:
        self.waited.append(tx_hash)
        if self.delay:
            await asyncio.sleep(self.delay)
        return TransactionReceipt(hash=tx_hash, success=self.success, vm_status=self.vm_status, version=42)


@pytest.fixture
def snapshot() -> AuctionSnapshot:
    return make_snapshot()


@pytest.fixture
def rejecting_signer() -> FakeSigner:
    return FakeSigner(error=SigningRejected("User rejected the request"))
