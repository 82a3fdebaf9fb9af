"""Wire settings into node client, reader, cache, submitter and coordinator."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from auctiondesk.cache.view_cache import AuctionViewCache
from auctiondesk.config.settings import MODULE_ADDRESS_ENV, Settings
from auctiondesk.coordinator import AuctionCoordinator, Notifier
from auctiondesk.ledger.base import Signer
from auctiondesk.ledger.intents import IntentBuilder
from auctiondesk.ledger.node import NodeClient
from auctiondesk.ledger.reader import RemoteAuctionReader
from auctiondesk.submission.cli_signer import AptosCliSigner
from auctiondesk.submission.submitter import TransactionSubmitter


@dataclass
class AuctionRuntime:
    node: NodeClient
    reader: RemoteAuctionReader
    cache: AuctionViewCache
    submitter: TransactionSubmitter
    coordinator: AuctionCoordinator


def build_runtime(
    settings: Settings,
    *,
    signer: Signer | None = None,
    notifier: Notifier | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AuctionRuntime:
    """Build every component from settings. Signer defaults to the aptos CLI profile."""
    if not settings.module_address:
        raise ValueError(f"No module address configured ([ledger] module_address or {MODULE_ADDRESS_ENV})")
    node = NodeClient(
        settings.node_url,
        timeout=settings.request_timeout_sec,
        poll_interval_sec=settings.confirmation_poll_sec,
        transport=transport,
    )
    reader = RemoteAuctionReader(node, settings.module_address, settings.module_name)
    cache = AuctionViewCache(reader)
    if signer is None:
        signer = AptosCliSigner(
            settings.wallet_account,
            profile=settings.wallet_profile,
            binary=settings.aptos_binary,
            node_url=settings.node_url,
        )
    submitter = TransactionSubmitter(signer, node, settings.confirmation_timeout_sec)
    coordinator = AuctionCoordinator(
        cache,
        submitter,
        IntentBuilder(settings.module_address, settings.module_name),
        notifier=notifier,
    )
    return AuctionRuntime(node=node, reader=reader, cache=cache, submitter=submitter, coordinator=coordinator)


@asynccontextmanager
async def open_runtime(settings: Settings, *, poll: bool = False, **kwargs) -> AsyncIterator[AuctionRuntime]:
    """Runtime for the duration of the block; optionally polls in the background."""
    runtime = build_runtime(settings, **kwargs)
    try:
        if poll:
            runtime.cache.start(settings.poll_interval_sec)
        yield runtime
    finally:
        runtime.cache.stop()
        await runtime.node.aclose()
