"""Cache provider interface.

Every backend (in-process LRU, Redis, Memcache) implements the same small
async key/value contract so the facade can swap them without callers
noticing. Providers raise ``CacheError`` subclasses on failure; recovering
from them is the facade's job, not the provider's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
import json
from typing import TYPE_CHECKING, Any

from collective_service.core.exceptions import SerializationError

if TYPE_CHECKING:
    from collections.abc import Callable


class ProviderType(StrEnum):
    """Supported cache backends."""

    MEMORY = "MEMORY"
    REDIS = "REDIS"
    MEMCACHE = "MEMCACHE"


class CacheProvider(ABC):
    """Async key/value store with optional per-entry expiry.

    ``None`` is the absent marker: ``get`` returns ``None`` for missing or
    expired keys, so ``None`` itself cannot be cached meaningfully.
    """

    name: str = "cache"

    async def connect(self) -> None:
        """Prepare client objects. Must not block on network I/O."""

    async def disconnect(self) -> None:
        """Release pools and connections."""

    @abstractmethod
    async def get(self, key: str, *, deserialize: Callable[[Any], Any] | None = None) -> Any | None:
        """Return the stored value, or ``None`` when absent or expired."""

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = 0,
        *,
        serialize: Callable[[Any], Any] | None = None,
    ) -> None:
        """Store ``value`` under ``key``; ``ttl`` of 0 or None never expires."""

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Return whether an unexpired entry exists for ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting an absent key is not an error."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry this provider can reach."""


def encode_value(
    value: Any,
    *,
    key: str,
    serialize: Callable[[Any], Any] | None = None,
) -> str:
    """Encode a value into the string stored by network backends.

    Without a custom serializer values are JSON encoded. A custom serializer
    must return ``str`` (or ``bytes`` holding UTF-8 text).

    Raises:
        SerializationError: The value cannot be encoded.
    """
    try:
        encoded = serialize(value) if serialize is not None else json.dumps(value)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Cannot encode value for cache: {e}",
            operation="set",
            key=key,
        ) from e

    if isinstance(encoded, bytes):
        encoded = encoded.decode("utf-8")
    if not isinstance(encoded, str):
        msg = f"Serializer returned {type(encoded).__name__}, expected str"
        raise SerializationError(msg, operation="set", key=key)
    return encoded


def decode_value(raw: str, *, deserialize: Callable[[Any], Any] | None = None) -> Any:
    """Decode a stored string back into a value.

    Raises:
        ValueError: ``raw`` is not valid for the chosen decoder.
    """
    if deserialize is not None:
        return deserialize(raw)
    return json.loads(raw)
