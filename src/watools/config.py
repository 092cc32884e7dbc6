"""Configuration management with XDG-compliant storage."""

import json
import os
from pathlib import Path
from typing import Any

DEFAULT_SERVER_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0


def get_config_dir() -> Path:
    """Get XDG-compliant config directory for watools.

    ``WATOOLS_CONFIG_DIR`` overrides the default location.

    Returns:
        Path to ~/.config/watools/
    """
    override = os.getenv("WATOOLS_CONFIG_DIR")
    if override:
        config_dir = Path(override)
    else:
        config_dir = Path.home() / ".config" / "watools"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get path to config file.

    Returns:
        Path to ~/.config/watools/config.json
    """
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from file.

    Returns:
        Dictionary of configuration values, or empty dict if file doesn't exist.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return {}

    with config_file.open("r") as f:
        data: dict[str, Any] = json.load(f)
        return data


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file.

    Args:
        config: Dictionary of configuration values to save.
    """
    config_file = get_config_file()
    with config_file.open("w") as f:
        json.dump(config, f, indent=2)


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a single configuration value.

    Args:
        key: Configuration key to retrieve.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    config = load_config()
    return config.get(key, default)


def set_config_value(key: str, value: Any) -> None:
    """Set a single configuration value.

    Args:
        key: Configuration key to set.
        value: Value to store.
    """
    config = load_config()
    config[key] = value
    save_config(config)


def get_server_url() -> str:
    """Return the configured remote store URL."""
    return str(get_config_value("server_url", DEFAULT_SERVER_URL))


def get_api_key() -> str | None:
    """Return the configured API key, if any."""
    api_key = get_config_value("api_key")
    if api_key is None:
        return None
    return str(api_key)


def get_timeout() -> float:
    """Return the HTTP timeout in seconds."""
    return float(get_config_value("timeout", DEFAULT_TIMEOUT))


def get_cache_db_path() -> Path:
    """Get path to the local cache database.

    Returns:
        The ``cache_path`` setting, or ~/.config/watools/cache.db
    """
    configured = get_config_value("cache_path")
    if configured:
        return Path(str(configured)).expanduser()
    return get_config_dir() / "cache.db"
