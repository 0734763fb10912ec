"""In-process LRU cache provider.

Design decisions:
- ``OrderedDict`` keeps entries in access order; the front is evicted first
- Reads and writes both count as access
- Expiry is lazy: entries are checked and dropped when read
- Clock is injectable so expiry can be simulated without sleeping
- State is per instance; nothing is shared across processes
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING, Any, Final

from collective_service.infra.cache.providers.base import CacheProvider
from collective_service.infra.metrics.tracking import track_eviction, update_cache_size

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES: Final[int] = 1000


@dataclass(slots=True)
class CacheEntry:
    """A stored value and its absolute expiry time (``None`` = never)."""

    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryProvider(CacheProvider):
    """Bounded LRU cache held in process memory.

    Example:
        provider = MemoryProvider(max_entries=2)
        await provider.set("a", 1)
        await provider.set("b", 2)
        await provider.get("a")     # "a" is now most recently used
        await provider.set("c", 3)  # evicts "b"

    Attributes:
        max_entries: Capacity; inserting one more distinct key evicts one.
    """

    name = "memory"

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            msg = f"max_entries must be >= 1, got {max_entries}"
            raise ValueError(msg)
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def _evict_if_needed(self) -> None:
        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            track_eviction(self.name, len(self._entries))
            logger.debug("Evicted LRU cache entry", extra={"cache_key": evicted_key})

    async def get(self, key: str, *, deserialize: Callable[[Any], Any] | None = None) -> Any | None:
        entry = self._lookup(key)
        if entry is None:
            return None
        if deserialize is not None:
            return deserialize(entry.value)
        return entry.value

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = 0,
        *,
        serialize: Callable[[Any], Any] | None = None,
    ) -> None:
        stored = serialize(value) if serialize is not None else value
        expires_at = self._clock() + ttl if ttl and ttl > 0 else None

        self._entries[key] = CacheEntry(value=stored, expires_at=expires_at)
        self._entries.move_to_end(key)
        self._evict_if_needed()
        update_cache_size(self.name, len(self._entries))

    async def has(self, key: str) -> bool:
        return self._lookup(key) is not None

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        update_cache_size(self.name, len(self._entries))

    async def clear(self) -> None:
        self._entries.clear()
        update_cache_size(self.name, 0)
