"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

MODULE_ADDRESS_ENV = "AUCTIONDESK_MODULE_ADDRESS"
DEFAULT_NODE_URL = "https://fullnode.devnet.aptoslabs.com/v1"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        ledger: dict[str, Any] | None = None,
        polling: dict[str, Any] | None = None,
        submission: dict[str, Any] | None = None,
        wallet: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.ledger = ledger or {}
        self.polling = polling or {}
        self.submission = submission or {}
        self.wallet = wallet or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            ledger=raw.get("ledger"),
            polling=raw.get("polling"),
            submission=raw.get("submission"),
            wallet=raw.get("wallet"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def node_url(self) -> str:
        return self.ledger.get("node_url", DEFAULT_NODE_URL).rstrip("/")

    @property
    def module_address(self) -> str:
        # Deployment address usually comes from the environment, not the checked-in config
        return os.environ.get(MODULE_ADDRESS_ENV) or self.ledger.get("module_address", "")

    @property
    def module_name(self) -> str:
        return self.ledger.get("module_name", "auction_contract")

    @property
    def request_timeout_sec(self) -> float:
        return float(self.ledger.get("request_timeout_sec", 10.0))

    @property
    def poll_interval_sec(self) -> float:
        return float(self.polling.get("interval_sec", 10.0))

    @property
    def confirmation_poll_sec(self) -> float:
        return float(self.polling.get("confirmation_poll_sec", 1.0))

    @property
    def confirmation_timeout_sec(self) -> float:
        return float(self.submission.get("confirmation_timeout_sec", 60.0))

    @property
    def wallet_account(self) -> str | None:
        return self.wallet.get("account") or None

    @property
    def wallet_profile(self) -> str:
        return self.wallet.get("profile", "default")

    @property
    def aptos_binary(self) -> str:
        return self.wallet.get("aptos_binary", "aptos")

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
