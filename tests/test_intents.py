"""Intent builder: amount scaling and entry function targets."""

from decimal import Decimal

import pytest

from auctiondesk.errors import InvalidAmount
from auctiondesk.ledger.intents import IntentBuilder, format_apt, to_octas
from auctiondesk.models import U64_MAX


@pytest.mark.parametrize(
    "amount, octas",
    [
        (6, 600_000_000),
        ("6", 600_000_000),
        (Decimal("6.5"), 650_000_000),
        (0.1, 10_000_000),
        ("0.00000001", 1),
    ],
)
def test_to_octas(amount, octas):
    assert to_octas(amount) == octas


@pytest.mark.parametrize(
    "amount",
    [0, -5, "0", float("nan"), float("inf"), "-inf", "abc", "", "0.000000001", Decimal(U64_MAX) + 1, "1e999999", True],
)
def test_to_octas_rejects(amount):
    with pytest.raises(InvalidAmount):
        to_octas(amount)


def test_bid_intent():
    intent = IntentBuilder("0x100").build_bid_intent(6)
    assert intent.function == "0x100::auction_contract::place_auction_bid"
    assert intent.arguments == ("600000000",)
    assert intent.argument_types == ("u64",)
    assert intent.payload()["arguments"] == ["600000000"]


def test_bid_intent_rejects_non_positive():
    builder = IntentBuilder("0x100")
    with pytest.raises(InvalidAmount):
        builder.build_bid_intent(0)
    with pytest.raises(InvalidAmount):
        builder.build_bid_intent(-5)


def test_close_and_collect_intents_take_no_arguments():
    builder = IntentBuilder("0x100", module_name="auction_contract")
    close = builder.build_close_intent()
    collect = builder.build_collect_intent()
    assert close.function == "0x100::auction_contract::close_auction"
    assert collect.function == "0x100::auction_contract::collect_auction_money"
    assert close.arguments == () and collect.arguments == ()
    assert close.function_name == "close_auction"


@pytest.mark.parametrize(
    "octas, text",
    [(500_000_000, "5 APT"), (650_000_000, "6.5 APT"), (5_000_000_000, "50 APT"), (1, "0.00000001 APT"), (0, "0 APT")],
)
def test_format_apt(octas, text):
    assert format_apt(octas) == text
