"""Cache layer configuration settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._sanitizers import sanitize_inline_numeric


class CacheSettings(BaseSettings):
    """Provider-independent cache settings.

    Environment variables use CACHE_ prefix.
    Example: CACHE_MEMORY_MAX_ENTRIES=1000
    """

    memory_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Capacity of the in-memory LRU provider (entries)",
    )

    account_id_ttl: int = Field(
        default=60 * 60 * 24,
        ge=0,
        description="TTL in seconds for cached account id lookups (1 day)",
    )

    contributors_ttl: int = Field(
        default=60 * 60,
        ge=0,
        description="TTL in seconds for the contributors cache (0 = no expiry)",
    )

    @field_validator("memory_max_entries", "account_id_ttl", "contributors_ttl", mode="before")
    @classmethod
    def _normalize_numeric(cls, value: Any) -> Any:
        """Allow numeric env vars with inline comments (e.g., "86400  # 1 day")."""
        return sanitize_inline_numeric(value)

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
