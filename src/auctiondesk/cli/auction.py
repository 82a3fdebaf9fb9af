"""Auction subcommand: show, watch, bid, close, collect."""

from __future__ import annotations

import asyncio
import signal
import sys
from datetime import datetime
from typing import Awaitable, Callable

import typer

from auctiondesk.cache.view_cache import CacheEvent
from auctiondesk.config.settings import Settings
from auctiondesk.coordinator import ActionResult, AuctionCoordinator, Notification, ResultStatus
from auctiondesk.errors import ReadError
from auctiondesk.ledger.intents import format_apt
from auctiondesk.models import AuctionSnapshot
from auctiondesk.runtime import open_runtime

app = typer.Typer(help="Read the auction and send bid/close/collect transactions")


def format_snapshot(snapshot: AuctionSnapshot) -> list[str]:
    """Detail card lines for one snapshot."""
    status = "Auction Ended" if snapshot.ended else "Auction Ongoing"
    end = datetime.fromtimestamp(snapshot.end_time).strftime("%Y-%m-%d %H:%M:%S")
    return [
        f"Auction by {snapshot.seller}  [{status}]",
        f"  Image:          {snapshot.media_url}",
        f"  Start price:    {format_apt(snapshot.start_price)}",
        f"  Highest bidder: {snapshot.highest_bidder or 'No bids yet'}",
        f"  Highest bid:    {format_apt(snapshot.highest_bid) if snapshot.highest_bid is not None else 'No bids yet'}",
        f"  End time:       {end}",
    ]


def _echo_notification(notification: Notification) -> None:
    typer.echo(f"{notification.title}: {notification.description}", err=notification.variant == "destructive")


def _settings_or_exit(ctx: typer.Context) -> Settings:
    settings = ctx.obj["settings"]
    if not settings.module_address:
        typer.echo("No module address configured. Set [ledger] module_address or AUCTIONDESK_MODULE_ADDRESS.")
        raise typer.Exit(1)
    return settings


def _run_action(ctx: typer.Context, action: Callable[[AuctionCoordinator], Awaitable[ActionResult]]) -> None:
    settings = _settings_or_exit(ctx)

    async def go() -> ActionResult:
        async with open_runtime(settings, notifier=_echo_notification) as runtime:
            return await action(runtime.coordinator)

    result = asyncio.run(go())
    if result.status is ResultStatus.SKIPPED:
        typer.echo(f"Nothing sent ({result.reason}).")
        raise typer.Exit(1)
    if result.status is ResultStatus.FAILED:
        raise typer.Exit(1)


@app.command("show")
def show(ctx: typer.Context) -> None:
    """Fetch the auction once and print it."""
    settings = _settings_or_exit(ctx)

    async def go() -> AuctionSnapshot:
        async with open_runtime(settings) as runtime:
            return await runtime.reader.fetch_snapshot()

    try:
        snapshot = asyncio.run(go())
    except ReadError as e:
        typer.echo(f"Could not read auction: {e}", err=True)
        raise typer.Exit(1)
    for line in format_snapshot(snapshot):
        typer.echo(line)


@app.command("watch")
def watch(
    ctx: typer.Context,
    interval: float = typer.Option(None, "--interval", "-i", help="Poll interval in seconds (overrides config)"),
) -> None:
    """Poll the auction and print it whenever a refresh lands (Ctrl+C to stop)."""
    settings = _settings_or_exit(ctx)
    if interval is not None:
        settings.polling["interval_sec"] = interval
    stop_event = asyncio.Event()

    def on_event(event: CacheEvent) -> None:
        if event.kind == "updated" and event.snapshot is not None:
            typer.echo("")
            for line in format_snapshot(event.snapshot):
                typer.echo(line)
        else:
            typer.echo("(view may be stale: last refresh failed)", err=True)

    async def go() -> None:
        async with open_runtime(settings, poll=True) as runtime:
            runtime.cache.subscribe(on_event)
            await stop_event.wait()

    def shutdown() -> None:
        stop_event.set()

    loop = asyncio.new_event_loop()
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGINT, shutdown)
        loop.add_signal_handler(signal.SIGTERM, shutdown)
    try:
        typer.echo(f"Watching auction every {settings.poll_interval_sec:g}s (Ctrl+C to stop)...")
        loop.run_until_complete(go())
    except KeyboardInterrupt:
        pass
    finally:
        loop.close()
    typer.echo("Stopped.")


@app.command("bid")
def bid(
    ctx: typer.Context,
    amount: str = typer.Argument(..., help="Bid amount in APT, e.g. 6 or 6.5"),
) -> None:
    """Place a bid."""
    _run_action(ctx, lambda coordinator: coordinator.place_bid(amount))


@app.command("close")
def close(ctx: typer.Context) -> None:
    """End the auction (the ledger decides whether that is allowed yet)."""
    _run_action(ctx, lambda coordinator: coordinator.end_auction())


@app.command("collect")
def collect(ctx: typer.Context) -> None:
    """Collect the auction proceeds."""
    _run_action(ctx, lambda coordinator: coordinator.collect_funds())
