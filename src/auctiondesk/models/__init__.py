"""Canonical schema (Pydantic) - AuctionSnapshot, intents, transaction outcomes."""

from auctiondesk.models.auction import AuctionSnapshot
from auctiondesk.models.transaction import (
    U64_MAX,
    BidIntent,
    EntryFunctionIntent,
    PendingTransaction,
    TransactionOutcome,
    TransactionReceipt,
    TxStatus,
)

__all__ = [
    "AuctionSnapshot",
    "BidIntent",
    "EntryFunctionIntent",
    "PendingTransaction",
    "TransactionOutcome",
    "TransactionReceipt",
    "TxStatus",
    "U64_MAX",
]
