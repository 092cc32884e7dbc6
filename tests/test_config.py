"""Tests for configuration storage."""

from __future__ import annotations

from pathlib import Path

from watools.config import (
    DEFAULT_SERVER_URL,
    get_api_key,
    get_cache_db_path,
    get_config_dir,
    get_config_value,
    get_server_url,
    get_timeout,
    load_config,
    set_config_value,
)


def test_config_dir_override(tmp_path: Path) -> None:
    """WATOOLS_CONFIG_DIR points the config at another directory."""
    assert get_config_dir() == tmp_path / "config"
    assert get_config_dir().is_dir()


def test_defaults_without_file() -> None:
    """An empty config falls back to defaults."""
    assert load_config() == {}
    assert get_server_url() == DEFAULT_SERVER_URL
    assert get_api_key() is None
    assert get_timeout() == 10.0
    assert get_cache_db_path() == get_config_dir() / "cache.db"


def test_set_and_get_value() -> None:
    """Values persist across loads."""
    set_config_value("server_url", "http://wa.example")
    set_config_value("timeout", 2.5)

    assert get_config_value("server_url") == "http://wa.example"
    assert get_server_url() == "http://wa.example"
    assert get_timeout() == 2.5
    assert load_config() == {"server_url": "http://wa.example", "timeout": 2.5}


def test_cache_path_setting(tmp_path: Path) -> None:
    """cache_path relocates the cache database."""
    set_config_value("cache_path", str(tmp_path / "elsewhere.db"))

    assert get_cache_db_path() == tmp_path / "elsewhere.db"
