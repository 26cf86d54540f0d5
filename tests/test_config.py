"""Tests for configuration adapter."""

import pytest

from techpro.adapters.config import AppConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove backend settings that may leak in from the developer environment."""
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_ACCESS_TOKEN",
        "FEED_PAGE_SIZE",
        "HEARTBEAT_INTERVAL_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_config_loads_defaults() -> None:
    """Given no environment variables, when loading config, then defaults are used."""
    config = AppConfig.for_testing()

    assert config.supabase_url == "http://localhost:54321"
    assert config.supabase_access_token is None
    assert config.feed_page_size == 50
    assert config.media_bucket == "post-images"
    assert config.heartbeat_interval_seconds == 30.0
    assert config.log_level == "INFO"


def test_config_loads_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Given environment variables, when loading config, then they are used."""
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("SUPABASE_ACCESS_TOKEN", "jwt")
    monkeypatch.setenv("FEED_PAGE_SIZE", "20")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = AppConfig.for_testing()

    assert config.supabase_url == "https://proj.supabase.co"
    assert config.supabase_anon_key == "anon"
    assert config.supabase_access_token == "jwt"
    assert config.feed_page_size == 20
    assert config.log_level == "DEBUG"


def test_config_rejects_url_without_scheme() -> None:
    """Given a URL without http scheme, when loading config, then validation fails."""
    with pytest.raises(ValueError, match="supabase_url must start with"):
        AppConfig.for_testing(supabase_url="proj.supabase.co")


def test_config_rejects_non_positive_interval() -> None:
    """Given a zero heartbeat interval, when loading config, then validation fails."""
    with pytest.raises(ValueError, match="must be positive"):
        AppConfig.for_testing(heartbeat_interval_seconds=0)


def test_config_rejects_empty_page_size() -> None:
    """Given a page size of zero, when loading config, then validation fails."""
    with pytest.raises(ValueError, match="feed_page_size must be at least 1"):
        AppConfig.for_testing(feed_page_size=0)


def test_config_rejects_unknown_log_level() -> None:
    """Given an unknown log level, when loading config, then validation fails."""
    with pytest.raises(ValueError, match="log_level must be one of"):
        AppConfig.for_testing(log_level="chatty")


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://proj.supabase.co", "wss://proj.supabase.co/realtime/v1/websocket"),
        ("http://localhost:54321", "ws://localhost:54321/realtime/v1/websocket"),
    ],
)
def test_realtime_url_uses_websocket_scheme(url: str, expected: str) -> None:
    """Given an http(s) project URL, when reading realtime_url, then the ws(s) endpoint is returned."""
    config = AppConfig.for_testing(supabase_url=url)

    assert config.realtime_url == expected
