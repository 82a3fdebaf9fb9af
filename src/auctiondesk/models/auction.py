"""AuctionSnapshot - immutable point-in-time copy of the ledger's auction state."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AuctionSnapshot(BaseModel):
    """Auction state as returned by the ledger's get_auction view. Amounts in octas (1e-8 APT)."""

    model_config = ConfigDict(frozen=True)

    seller: str
    start_price: int = Field(..., ge=0)
    highest_bidder: str | None = None
    highest_bid: int | None = Field(None, ge=0)
    end_time: int = Field(..., description="Seconds since epoch")
    ended: bool = False
    media_url: str = ""
    fetched_at: float | None = None  # local receive time, seconds since epoch

    @model_validator(mode="after")
    def _check_leading_bid(self) -> AuctionSnapshot:
        if (self.highest_bid is None) != (self.highest_bidder is None):
            raise ValueError("highest_bid and highest_bidder must be both present or both absent")
        if self.highest_bid is not None and self.highest_bid < self.start_price:
            raise ValueError(
                f"highest_bid {self.highest_bid} is below start_price {self.start_price}"
            )
        return self

    @property
    def has_bids(self) -> bool:
        return self.highest_bidder is not None

    @property
    def leading_amount(self) -> int:
        """Amount a new bid has to beat: the highest bid, or the start price when there are none."""
        return self.highest_bid if self.highest_bid is not None else self.start_price

    def is_past_end(self, now: float | None = None) -> bool:
        """Wall-clock check only. The ledger's `ended` flag stays authoritative."""
        now = time.time() if now is None else now
        return now >= self.end_time
