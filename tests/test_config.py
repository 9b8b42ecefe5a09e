"""Tests for splitledger.config."""

import stat
from pathlib import Path

import pytest

from splitledger.config import (
    create_default_config,
    get_config_path,
    get_ledger_path,
    get_setting,
    load_config,
    load_config_or_default,
    save_config,
)


@pytest.fixture(autouse=True)
def xdg_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


class TestConfigPaths:
    """Tests for XDG path resolution."""

    def test_config_path_under_xdg(self, xdg_dirs: Path) -> None:
        """Should place the config under XDG_CONFIG_HOME."""
        assert get_config_path() == xdg_dirs / "config" / "splitledger" / "config.toml"

    def test_default_ledger_path_under_xdg(self, xdg_dirs: Path) -> None:
        """Should fall back to the XDG data dir."""
        assert get_ledger_path({}) == xdg_dirs / "data" / "splitledger" / "ledger.toml"

    def test_ledger_path_from_config(self, tmp_path: Path) -> None:
        """Should use the configured ledger path."""
        assert get_ledger_path({"ledger_path": str(tmp_path / "x.toml")}) == tmp_path / "x.toml"


class TestCreateDefaultConfig:
    """Tests for create_default_config and load_config."""

    def test_creates_private_file(self) -> None:
        """Should write the file readable only by its owner."""
        create_default_config()
        mode = stat.S_IMODE(get_config_path().stat().st_mode)

        assert mode == 0o600

    def test_defaults_round_trip(self, tmp_path: Path) -> None:
        """Should write every default setting."""
        create_default_config(ledger_path=tmp_path / "group.toml")
        config = load_config()

        assert config["ledger_path"] == str(tmp_path / "group.toml")
        assert get_setting(config, "display.currency_symbol") == "$"
        assert get_setting(config, "logging.level") == "WARNING"
        assert get_setting(config, "logging.json") is False

    def test_load_missing_raises(self) -> None:
        """Should raise FileNotFoundError without a config file."""
        with pytest.raises(FileNotFoundError):
            load_config()

    def test_load_or_default_without_file(self) -> None:
        """Should return defaults when no config exists."""
        assert get_setting(load_config_or_default(), "logging.level") == "WARNING"

    def test_save_config(self, tmp_path: Path) -> None:
        """Should persist changes."""
        config_path = tmp_path / "custom.toml"
        save_config({"display": {"currency_symbol": "€"}}, config_path)

        assert load_config(config_path) == {"display": {"currency_symbol": "€"}}


class TestGetSetting:
    """Tests for get_setting."""

    def test_missing_key_returns_default(self) -> None:
        """Should return the default for any missing part of the path."""
        config = {"logging": {"level": "INFO"}}

        assert get_setting(config, "logging.json", False) is False
        assert get_setting(config, "display.currency_symbol", "") == ""
        assert get_setting(config, "logging.level.name", "x") == "x"
