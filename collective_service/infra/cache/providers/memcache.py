"""Memcache cache provider.

One ``aiomcache.Client`` is kept per configured server and keys are spread
across them by CRC32. Memcache constrains keys (at most 250 bytes, no
whitespace or control characters) and TTLs (above 30 days they are read as
unix timestamps), so both are normalised here rather than rejected.
"""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING, Any, Final
import zlib

import aiomcache
from aiomcache.exceptions import ClientException

from collective_service.core.exceptions import (
    CacheError,
    ConfigurationError,
    ProviderConnectionError,
)
from collective_service.core.settings.memcache import MAX_MEMCACHE_TTL
from collective_service.infra.cache.providers.base import (
    CacheProvider,
    decode_value,
    encode_value,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from collective_service.core.settings.memcache import MemcacheSettings

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH: Final[int] = 250


def normalize_key(key: str) -> bytes:
    """Return a memcache-safe key.

    Keys that are too long or contain whitespace/control characters are
    replaced by their SHA-256 hex digest.
    """
    encoded = key.encode("utf-8")
    if len(encoded) > MAX_KEY_LENGTH or any(b <= 0x20 or b == 0x7F for b in encoded):
        return hashlib.sha256(encoded).hexdigest().encode("ascii")
    return encoded


class MemcacheProvider(CacheProvider):
    """Cache provider backed by one or more Memcache servers.

    Example:
        provider = MemcacheProvider(get_memcache_settings())
        await provider.connect()
        await provider.set("key", [1, 2, 3], ttl=60)
        await provider.get("key")  # [1, 2, 3]
    """

    name = "memcache"

    def __init__(
        self,
        settings: MemcacheSettings | None = None,
        *,
        clients: Sequence[aiomcache.Client] | None = None,
        max_ttl: int | None = None,
    ) -> None:
        self._settings = settings
        self._clients: list[aiomcache.Client] = list(clients or [])
        self._owns_clients = not self._clients
        if max_ttl is None:
            max_ttl = settings.max_ttl if settings is not None else MAX_MEMCACHE_TTL
        self.max_ttl = max_ttl

    async def connect(self) -> None:
        """Create one client per server. aiomcache pools connect lazily.

        Raises:
            ConfigurationError: No clients were injected and no servers are set.
        """
        if self._clients:
            return

        if self._settings is None or not self._settings.servers:
            raise ConfigurationError(
                "Memcache provider requires MEMCACHE_SERVERS",
                extra={"provider_type": "MEMCACHE"},
            )

        self._clients = [
            aiomcache.Client(host, port, pool_size=self._settings.pool_size)
            for host, port in self._settings.addresses()
        ]
        self._owns_clients = True
        logger.info(
            "Created Memcache cache clients",
            extra={"servers": self._settings.servers, "pool_size": self._settings.pool_size},
        )

    async def disconnect(self) -> None:
        if self._owns_clients:
            for client in self._clients:
                await client.close()
        self._clients = []

    def _client_for(self, key: bytes) -> aiomcache.Client:
        if not self._clients:
            msg = "Memcache clients not created. Call connect() first."
            raise RuntimeError(msg)
        return self._clients[zlib.crc32(key) % len(self._clients)]

    def _clamp_ttl(self, ttl: int | None) -> int:
        if not ttl or ttl < 0:
            return 0
        return min(ttl, self.max_ttl)

    async def _call[T](self, operation: str, key: str | None, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except OSError as e:
            raise ProviderConnectionError(
                f"Memcache unavailable: {e}",
                operation=operation,
                key=key,
            ) from e
        except ClientException as e:
            raise CacheError(
                f"Memcache command failed: {e}",
                operation=operation,
                key=key,
            ) from e

    async def get(self, key: str, *, deserialize: Callable[[Any], Any] | None = None) -> Any | None:
        mc_key = normalize_key(key)
        raw = await self._call("get", key, self._client_for(mc_key).get(mc_key))
        if raw is None:
            return None

        try:
            return decode_value(raw.decode("utf-8"), deserialize=deserialize)
        except (TypeError, ValueError):
            logger.debug("Undecodable cache value treated as miss", extra={"cache_key": key})
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = 0,
        *,
        serialize: Callable[[Any], Any] | None = None,
    ) -> None:
        encoded = encode_value(value, key=key, serialize=serialize).encode("utf-8")
        mc_key = normalize_key(key)
        client = self._client_for(mc_key)
        await self._call("set", key, client.set(mc_key, encoded, exptime=self._clamp_ttl(ttl)))

    async def has(self, key: str) -> bool:
        mc_key = normalize_key(key)
        raw = await self._call("has", key, self._client_for(mc_key).get(mc_key))
        return raw is not None

    async def delete(self, key: str) -> None:
        mc_key = normalize_key(key)
        await self._call("delete", key, self._client_for(mc_key).delete(mc_key))

    async def clear(self) -> None:
        """Flush every configured server (shared with other processes)."""
        for client in self._clients:
            await self._call("clear", None, client.flush_all())
