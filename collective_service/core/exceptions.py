"""Custom exception classes for the cache layer."""

from __future__ import annotations

from typing import Any


class CacheError(Exception):
    """Base cache exception.

    All cache infrastructure exceptions inherit from this class. They carry a
    short ``kind`` identifier so that degraded results and log records can
    name the failure category without inspecting the exception type.

    Attributes:
        detail: Human-readable error message.
        kind: Error category identifier.
        operation: Cache operation that failed (get, set, ...), if known.
        key: Cache key involved, if any.
        extra: Additional context-specific information about the error.

    Example:
        raise CacheError(
            detail="Value too large",
            operation="set",
            key="collective_id_with_slug_acme",
        )
    """

    kind: str = "cache-error"

    def __init__(
        self,
        detail: str,
        *,
        operation: str | None = None,
        key: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize cache exception.

        Args:
            detail: Human-readable error message.
            operation: Cache operation that failed.
            key: Cache key involved.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.operation = operation
        self.key = key
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error": self.detail,
            "kind": self.kind,
            "operation": self.operation,
            "key": self.key,
            **self.extra,
        }


class ProviderConnectionError(CacheError):
    """Raised when a cache backend is unreachable or times out.

    Recovered at the cache facade: reads become misses, writes are dropped.
    """

    kind = "provider-connection"


class SerializationError(CacheError):
    """Raised when a value cannot be encoded for (or decoded from) a backend."""

    kind = "serialization"


class ConfigurationError(CacheError):
    """Raised when the cache provider cannot be built from configuration.

    Unlike the other cache errors this one is fatal: it is raised during
    provider resolution and is never swallowed by the facade.

    Example:
        raise ConfigurationError(
            detail="Unsupported cache provider: DISK",
            extra={"provider_type": "DISK"},
        )
    """

    kind = "configuration"
