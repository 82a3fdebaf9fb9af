"""Transaction intent builder - user actions to unsigned entry-function calls. No I/O."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from auctiondesk.errors import InvalidAmount
from auctiondesk.models import U64_MAX, BidIntent, EntryFunctionIntent

OCTAS_PER_APT = 10**8
APT_DECIMALS = 8

AmountLike = Decimal | int | float | str


def parse_amount(value: AmountLike) -> Decimal:
    """Parse user input into a Decimal. Floats go through str() so 0.1 stays 0.1."""
    if isinstance(value, bool):
        raise InvalidAmount(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Not an amount: {value!r}") from e


def to_octas(value: AmountLike) -> int:
    """Convert a display amount (APT) to octas. Raises InvalidAmount."""
    amount = parse_amount(value)
    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    if amount <= 0:
        raise InvalidAmount(f"Amount must be positive, got {value!r}")
    # Nothing above 1e20 APT fits in u64 octas
    if amount.adjusted() > 20:
        raise InvalidAmount(f"Amount {value!r} does not fit in u64 octas")
    scaled = amount * OCTAS_PER_APT
    if scaled != scaled.to_integral_value():
        raise InvalidAmount(f"Amount {value!r} has more than {APT_DECIMALS} decimal places")
    octas = int(scaled)
    if octas > U64_MAX:
        raise InvalidAmount(f"Amount {value!r} does not fit in u64 octas")
    return octas


def format_apt(octas: int) -> str:
    """Octas to a display string, e.g. 500000000 -> '5 APT'."""
    amount = (Decimal(octas) / OCTAS_PER_APT).normalize()
    text = f"{amount:f}"
    return f"{text} APT"


@dataclass(frozen=True)
class IntentBuilder:
    """Builds intents for one deployed auction module. Never looks at auction state."""

    module_address: str
    module_name: str = "auction_contract"

    def _function(self, name: str) -> str:
        return f"{self.module_address}::{self.module_name}::{name}"

    def build_bid_intent(self, amount: AmountLike) -> EntryFunctionIntent:
        bid = BidIntent(amount=to_octas(amount))
        return EntryFunctionIntent(
            function=self._function("place_auction_bid"),
            arguments=(str(bid.amount),),
            argument_types=("u64",),
        )

    def build_close_intent(self) -> EntryFunctionIntent:
        return EntryFunctionIntent(function=self._function("close_auction"))

    def build_collect_intent(self) -> EntryFunctionIntent:
        return EntryFunctionIntent(function=self._function("collect_auction_money"))
