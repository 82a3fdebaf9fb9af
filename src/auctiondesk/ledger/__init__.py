"""Ledger access: node REST client, auction reader, intent builder."""

from auctiondesk.ledger.intents import OCTAS_PER_APT, IntentBuilder, format_apt, to_octas
from auctiondesk.ledger.node import NodeClient
from auctiondesk.ledger.reader import RemoteAuctionReader, parse_snapshot

__all__ = [
    "IntentBuilder",
    "NodeClient",
    "OCTAS_PER_APT",
    "RemoteAuctionReader",
    "format_apt",
    "parse_snapshot",
    "to_octas",
]
