"""Memcache cache configuration settings."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ._sanitizers import sanitize_inline_numeric, split_server_list

DEFAULT_MEMCACHE_PORT = 11211

# Memcache treats expirations above 30 days as absolute unix timestamps.
MAX_MEMCACHE_TTL = 60 * 60 * 24 * 30


class MemcacheSettings(BaseSettings):
    """Memcache cache provider settings.

    Environment variables use MEMCACHE_ prefix.
    Example: MEMCACHE_SERVERS="cache-1:11211,cache-2:11211"

    The Memcache provider is selected when no Redis URL is configured and
    at least one server is listed.
    """

    servers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Memcache servers as host[:port], comma or space separated",
    )

    pool_size: int = Field(
        default=2,
        ge=1,
        le=100,
        description="Maximum connections per Memcache server",
    )

    max_ttl: int = Field(
        default=MAX_MEMCACHE_TTL,
        ge=1,
        le=MAX_MEMCACHE_TTL,
        description="Largest TTL sent to Memcache; longer TTLs are clamped",
    )

    @field_validator("servers", mode="before")
    @classmethod
    def _split_servers(cls, value: Any) -> Any:
        """Accept comma separated strings as well as lists."""
        return split_server_list(value)

    @field_validator("servers")
    @classmethod
    def _validate_servers(cls, value: list[str]) -> list[str]:
        """Ensure every entry parses as host[:port]."""
        for server in value:
            host, _, port = server.rpartition(":") if ":" in server else (server, "", "")
            if not host or (port and not port.isdigit()):
                msg = f"Invalid Memcache server address: {server!r}"
                raise ValueError(msg)
        return value

    @field_validator("pool_size", "max_ttl", mode="before")
    @classmethod
    def _normalize_numeric(cls, value: Any) -> Any:
        """Allow numeric env vars with inline comments."""
        return sanitize_inline_numeric(value)

    @computed_field
    @property
    def is_configured(self) -> bool:
        """Memcache is configured when at least one server is listed."""
        return bool(self.servers)

    def addresses(self) -> list[tuple[str, int]]:
        """Return ``(host, port)`` pairs for every configured server."""
        result: list[tuple[str, int]] = []
        for server in self.servers:
            if ":" in server:
                host, _, port = server.rpartition(":")
                result.append((host, int(port)))
            else:
                result.append((server, DEFAULT_MEMCACHE_PORT))
        return result

    model_config = SettingsConfigDict(
        env_prefix="MEMCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
