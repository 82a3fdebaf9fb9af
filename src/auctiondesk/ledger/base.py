"""Collaborator protocols: snapshot source, signer, transaction watcher."""

from __future__ import annotations

from typing import Protocol

from auctiondesk.models import (
    AuctionSnapshot,
    EntryFunctionIntent,
    PendingTransaction,
    TransactionReceipt,
)


class SnapshotSource(Protocol):
    """Anything the view cache can poll. Raises ReadError on failure."""

    async def fetch_snapshot(self) -> AuctionSnapshot: ...


class Signer(Protocol):
    """Wallet side: signs an unsigned intent and submits it, or refuses."""

    @property
    def account(self) -> str | None: ...

    async def sign_and_submit(self, intent: EntryFunctionIntent) -> PendingTransaction: ...


class TransactionWatcher(Protocol):
    """Resolves a submitted hash to its executed receipt (committed or failed)."""

    async def wait_for_transaction(self, tx_hash: str) -> TransactionReceipt: ...
