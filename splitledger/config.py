"""Configuration file management for splitledger."""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from splitledger.store.ledger_file import get_default_ledger_path

DEFAULT_LOG_LEVEL = "WARNING"


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "splitledger" / "config.toml"


def default_config(ledger_path: Path | None = None) -> dict[str, Any]:
    return {
        "ledger_path": str(ledger_path or get_default_ledger_path()),
        "display": {"currency_symbol": "$"},
        "logging": {"level": DEFAULT_LOG_LEVEL, "json": False},
    }


def create_default_config(config_path: Path | None = None, ledger_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
        ledger_path: Ledger file to record. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(ledger_path), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def load_config_or_default(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration, using defaults when the file doesn't exist yet."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return default_config()


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_setting(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Look up a dotted key such as "logging.level".

    Args:
        config: Configuration dictionary.
        key: Dotted path into nested tables.
        default: Value returned when any part of the path is missing.

    Returns:
        The setting, or default.
    """
    value: Any = config
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return default
        value = value[part]
    return value


def get_ledger_path(config: dict[str, Any]) -> Path:
    """Ledger file path from config, falling back to the XDG data dir."""
    raw = get_setting(config, "ledger_path")
    if raw:
        return Path(raw).expanduser()
    return get_default_ledger_path()
