"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from auctiondesk.config import get_settings
from auctiondesk.config.settings import configure_logging

app = typer.Typer(
    name="auctiondesk",
    help="AuctionDesk - watch an on-chain auction, place bids, close it and collect proceeds.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from auctiondesk.cli import api_cmd, auction  # noqa: E402

app.add_typer(auction.app, name="auction")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
