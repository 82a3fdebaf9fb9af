"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from auctiondesk.coordinator import ActionResult
from auctiondesk.ledger.intents import format_apt
from auctiondesk.models import AuctionSnapshot


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. not_loaded, in_flight")


# --- Auction ---
class AuctionResponse(BaseModel):
    seller: str
    start_price: int = Field(..., description="Octas (1e-8 APT)")
    start_price_display: str
    highest_bidder: str | None = None
    highest_bid: int | None = None
    highest_bid_display: str | None = None
    end_time: int
    ended: bool
    media_url: str
    stale: bool = Field(..., description="True when the last refresh failed or is overdue")
    last_refreshed_at: float | None = None

    @classmethod
    def from_snapshot(
        cls, snapshot: AuctionSnapshot, *, stale: bool, last_refreshed_at: float | None
    ) -> AuctionResponse:
        return cls(
            seller=snapshot.seller,
            start_price=snapshot.start_price,
            start_price_display=format_apt(snapshot.start_price),
            highest_bidder=snapshot.highest_bidder,
            highest_bid=snapshot.highest_bid,
            highest_bid_display=format_apt(snapshot.highest_bid) if snapshot.highest_bid is not None else None,
            end_time=snapshot.end_time,
            ended=snapshot.ended,
            media_url=snapshot.media_url,
            stale=stale,
            last_refreshed_at=last_refreshed_at,
        )


# --- Actions ---
class BidRequest(BaseModel):
    amount: str | int | float = Field(..., description="Bid in APT, e.g. '6.5' or 6")


class ActionResponse(BaseModel):
    action: str
    status: str = Field(..., description="succeeded | failed | skipped")
    tx_hash: str | None = None
    vm_status: str | None = None
    error: str | None = None
    reason: str | None = None

    @classmethod
    def from_result(cls, result: ActionResult) -> ActionResponse:
        return cls(
            action=result.action.value,
            status=result.status.value,
            tx_hash=result.tx_hash,
            vm_status=result.receipt.vm_status if result.receipt else None,
            error=result.error,
            reason=result.reason,
        )
