"""Remote auction reader - one get_auction view call per fetch."""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from auctiondesk.errors import ReadError
from auctiondesk.ledger.node import NodeClient
from auctiondesk.models import AuctionSnapshot

log = structlog.get_logger(__name__)

REQUIRED_FIELDS = (
    "seller",
    "start_price",
    "highest_bidder",
    "highest_bid",
    "auction_end_time",
    "auction_ended",
    "auction_url",
)


def _u64(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ReadError(f"{key}: expected u64, got bool")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ReadError(f"{key}: expected u64, got {value!r}") from e


def _option(raw: dict[str, Any], key: str) -> Any | None:
    """Move Option<T> comes back as {"vec": []} or {"vec": [value]}."""
    value = raw[key]
    if not isinstance(value, dict) or not isinstance(value.get("vec"), list):
        raise ReadError(f"{key}: expected option {{'vec': [...]}}, got {value!r}")
    vec = value["vec"]
    if len(vec) > 1:
        raise ReadError(f"{key}: option holds {len(vec)} values")
    return vec[0] if vec else None


def parse_snapshot(payload: Any, fetched_at: float | None = None) -> AuctionSnapshot:
    """Convert a get_auction view result into an AuctionSnapshot. Raises ReadError, never partial."""
    if isinstance(payload, list):
        if len(payload) != 1:
            raise ReadError(f"get_auction returned {len(payload)} values, expected 1")
        payload = payload[0]
    if not isinstance(payload, dict):
        raise ReadError(f"get_auction returned {type(payload).__name__}, expected object")
    missing = [k for k in REQUIRED_FIELDS if k not in payload]
    if missing:
        raise ReadError(f"get_auction payload missing fields: {', '.join(missing)}")

    bidder = _option(payload, "highest_bidder")
    bid = _option(payload, "highest_bid")
    ended = payload["auction_ended"]
    if not isinstance(ended, bool):
        raise ReadError(f"auction_ended: expected bool, got {ended!r}")
    try:
        return AuctionSnapshot(
            seller=str(payload["seller"]),
            start_price=_u64(payload["start_price"], "start_price"),
            highest_bidder=str(bidder) if bidder is not None else None,
            highest_bid=_u64(bid, "highest_bid") if bid is not None else None,
            end_time=_u64(payload["auction_end_time"], "auction_end_time"),
            ended=ended,
            media_url=str(payload["auction_url"]),
            fetched_at=fetched_at,
        )
    except ValidationError as e:
        raise ReadError(f"Invalid auction snapshot: {e.errors()[0]['msg']}") from e


class RemoteAuctionReader:
    """Fetches the authoritative auction snapshot from the ledger."""

    def __init__(self, node: NodeClient, module_address: str, module_name: str = "auction_contract") -> None:
        self.node = node
        self.function = f"{module_address}::{module_name}::get_auction"

    async def fetch_snapshot(self) -> AuctionSnapshot:
        try:
            payload = await self.node.view(self.function)
        except httpx.HTTPStatusError as e:
            raise ReadError(f"get_auction failed with HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ReadError(f"get_auction request failed: {e}") from e
        except ValueError as e:
            raise ReadError(f"get_auction returned invalid JSON: {e}") from e
        snapshot = parse_snapshot(payload, fetched_at=time.time())
        log.debug("snapshot_fetched", ended=snapshot.ended, highest_bid=snapshot.highest_bid)
        return snapshot
