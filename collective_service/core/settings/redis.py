"""Redis cache configuration settings."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._sanitizers import sanitize_inline_numeric, strip_inline_comment


class RedisSettings(BaseSettings):
    """Redis cache provider settings.

    Environment variables use REDIS_ prefix.
    Example: REDIS_SERVER_URL="redis://localhost:6379/0"

    The Redis provider is selected whenever ``server_url`` is set; it takes
    precedence over Memcache and the in-memory fallback.
    """

    # ──────────────────────────────────────────────────────────────
    # Connection configuration
    # ──────────────────────────────────────────────────────────────

    server_url: str | None = Field(
        default=None,
        description="Redis connection URL (redis[s]://[username:password@]host:port/db).",
    )

    # ──────────────────────────────────────────────────────────────
    # Connection pool settings
    # ──────────────────────────────────────────────────────────────

    max_connections: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum Redis connection pool size",
    )

    socket_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=30.0,
        description="Redis socket timeout in seconds (for operations)",
    )

    socket_connect_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=30.0,
        description="Redis socket connection timeout in seconds (initial connection)",
    )

    socket_keepalive: bool = Field(
        default=True,
        description="Enable TCP keepalive on Redis connections",
    )

    health_check_interval: int = Field(
        default=30,
        ge=0,
        le=300,
        description="Connection health check interval in seconds (0 to disable)",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators and computed fields
    # ──────────────────────────────────────────────────────────────

    @field_validator("server_url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> Any:
        """Treat blank URLs as unset."""
        if isinstance(value, str):
            cleaned = strip_inline_comment(value)
            return cleaned or None
        return value

    @field_validator("server_url")
    @classmethod
    def _validate_scheme(cls, value: str | None) -> str | None:
        """Reject URLs redis-py cannot open."""
        if value is None:
            return value
        scheme = urlparse(value).scheme
        if scheme not in {"redis", "rediss", "unix"}:
            msg = f"Unsupported Redis URL scheme: {scheme or '(none)'}"
            raise ValueError(msg)
        return value

    @field_validator("max_connections", "health_check_interval", mode="before")
    @classmethod
    def _normalize_numeric(cls, value: Any) -> Any:
        """Allow numeric env vars with inline comments (e.g., "50  # pool")."""
        return sanitize_inline_numeric(value)

    @computed_field
    @property
    def is_configured(self) -> bool:
        """Redis is configured when a server URL is present."""
        return bool(self.server_url)

    # ──────────────────────────────────────────────────────────────
    # Helper methods
    # ──────────────────────────────────────────────────────────────

    def connection_pool_kwargs(self) -> dict[str, Any]:
        """Return kwargs for ``redis.asyncio.Redis.from_url()``.

        Returns:
            Dictionary suitable for unpacking into ``Redis.from_url(url, **kwargs)``.
        """
        kwargs: dict[str, Any] = {
            "max_connections": self.max_connections,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
            "socket_keepalive": self.socket_keepalive,
            "decode_responses": True,
            "encoding": "utf-8",
        }

        if self.health_check_interval > 0:
            kwargs["health_check_interval"] = self.health_check_interval

        return kwargs

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
