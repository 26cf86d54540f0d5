"""12-factor configuration adapter using environment variables."""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend configuration
    supabase_url: str = Field(
        default="http://localhost:54321",
        description="Base URL of the Supabase project (REST, auth, storage, realtime)",
    )
    supabase_anon_key: str = Field(default="", description="Public anon API key")
    supabase_access_token: str | None = Field(
        default=None,
        description="Access token (JWT) of the signed-in user; unset means signed out",
    )
    request_timeout_seconds: float = Field(
        default=10.0, description="Timeout for backend HTTP requests in seconds"
    )

    # Feed configuration
    feed_page_size: int = Field(default=50, description="Number of newest posts to load")
    media_bucket: str = Field(
        default="post-images", description="Storage bucket holding post media"
    )

    # Presence configuration
    heartbeat_interval_seconds: float = Field(
        default=30.0, description="Seconds between presence heartbeats"
    )

    # Realtime configuration
    realtime_heartbeat_seconds: float = Field(
        default=25.0, description="Seconds between realtime socket keepalive messages"
    )
    realtime_reconnect_seconds: float = Field(
        default=5.0, description="Delay before reconnecting a dropped realtime socket"
    )

    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Validate the URL scheme and strip trailing slashes."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("supabase_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator(
        "request_timeout_seconds",
        "heartbeat_interval_seconds",
        "realtime_heartbeat_seconds",
        "realtime_reconnect_seconds",
    )
    @classmethod
    def validate_positive_interval(cls, v: float) -> float:
        """Validate that timeouts and intervals are positive."""
        if v <= 0:
            raise ValueError("intervals and timeouts must be positive")
        return v

    @field_validator("feed_page_size")
    @classmethod
    def validate_feed_page_size(cls, v: int) -> int:
        """Validate the feed page size is at least one post."""
        if v < 1:
            raise ValueError("feed_page_size must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        if v.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return v.upper()

    @property
    def realtime_url(self) -> str:
        """Websocket URL of the realtime endpoint."""
        if self.supabase_url.startswith("https://"):
            base = "wss://" + self.supabase_url.removeprefix("https://")
        else:
            base = "ws://" + self.supabase_url.removeprefix("http://")
        return f"{base}/realtime/v1/websocket"

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a config that ignores any local .env file."""
        return cls(_env_file=None, **overrides)
