"""Config loading, profile overlay and CLI wiring."""

from typer.testing import CliRunner

from auctiondesk.cli.app import app
from auctiondesk.config.settings import MODULE_ADDRESS_ENV, Settings, get_settings

DEFAULT_TOML = """
[ledger]
node_url = "https://fullnode.devnet.aptoslabs.com/v1/"
module_address = "0x100"

[polling]
interval_sec = 10

[logging]
level = "info"
"""

DEV_TOML = """
[polling]
interval_sec = 2

[wallet]
account = "0xuser"
"""


def test_defaults_without_config():
    settings = Settings.from_dict({})
    assert settings.poll_interval_sec == 10.0
    assert settings.confirmation_timeout_sec == 60.0
    assert settings.module_name == "auction_contract"
    assert settings.wallet_account is None
    assert settings.logging_level == "INFO"


def test_profile_overlay(tmp_path, monkeypatch):
    monkeypatch.delenv(MODULE_ADDRESS_ENV, raising=False)
    (tmp_path / "default.toml").write_text(DEFAULT_TOML)
    (tmp_path / "dev.toml").write_text(DEV_TOML)
    base = get_settings(config_dir=tmp_path)
    dev = get_settings("dev", config_dir=tmp_path)
    assert base.poll_interval_sec == 10.0
    assert dev.poll_interval_sec == 2.0
    assert dev.wallet_account == "0xuser"
    assert dev.module_address == "0x100"
    assert dev.node_url == "https://fullnode.devnet.aptoslabs.com/v1"


def test_module_address_env_override(monkeypatch):
    monkeypatch.setenv(MODULE_ADDRESS_ENV, "0xfeed")
    assert Settings.from_dict({"ledger": {"module_address": "0x100"}}).module_address == "0xfeed"


def test_cli_requires_module_address(tmp_path, monkeypatch):
    monkeypatch.delenv(MODULE_ADDRESS_ENV, raising=False)
    (tmp_path / "default.toml").write_text("[ledger]\nmodule_address = \"\"\n")
    result = CliRunner().invoke(app, ["--config-dir", str(tmp_path), "auction", "show"])
    assert result.exit_code == 1
    assert "No module address configured" in result.output
