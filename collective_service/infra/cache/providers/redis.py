"""Redis cache provider.

Wraps a ``redis.asyncio`` client built from ``RedisSettings``. Values are
JSON encoded unless a custom serializer is supplied. redis-py exceptions are
translated into the cache error taxonomy so the facade can recover from
them uniformly.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING, Any, cast

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from collective_service.core.exceptions import (
    CacheError,
    ConfigurationError,
    ProviderConnectionError,
)
from collective_service.infra.cache.providers.base import (
    CacheProvider,
    decode_value,
    encode_value,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from collective_service.core.settings.redis import RedisSettings

logger = logging.getLogger(__name__)


class RedisProvider(CacheProvider):
    """Cache provider backed by a Redis server.

    Example:
        provider = RedisProvider(get_redis_settings())
        await provider.connect()
        await provider.set("key", {"data": "value"}, ttl=3600)
        value = await provider.get("key")
        await provider.disconnect()

    A pre-built client may be injected instead of settings, which is how
    tests substitute an ``AsyncMock``.
    """

    name = "redis"

    def __init__(
        self,
        settings: RedisSettings | None = None,
        *,
        client: Redis | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._owns_client = client is None

    async def connect(self) -> None:
        """Build the client and its connection pool.

        ``from_url`` connects lazily, so an unreachable server surfaces on
        the first command rather than here.

        Raises:
            ConfigurationError: No client was injected and no URL is set.
        """
        if self._client is not None:
            return

        if self._settings is None or not self._settings.server_url:
            raise ConfigurationError(
                "Redis provider requires REDIS_SERVER_URL",
                extra={"provider_type": "REDIS"},
            )

        logger.info(
            "Creating Redis cache client",
            extra={
                "max_connections": self._settings.max_connections,
                "socket_timeout": self._settings.socket_timeout,
            },
        )
        self._client = Redis.from_url(
            self._settings.server_url,
            **self._settings.connection_pool_kwargs(),
        )
        self._owns_client = True

    async def disconnect(self) -> None:
        if self._client is None:
            return
        if self._owns_client:
            await cast("Any", self._client).aclose()
            logger.info("Redis cache client closed")
        self._client = None

    @property
    def client(self) -> Redis:
        """Get the Redis client instance.

        Raises:
            RuntimeError: If not connected.
        """
        if self._client is None:
            msg = "Redis client not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._client

    @asynccontextmanager
    async def _translate_errors(self, operation: str, key: str | None = None) -> AsyncIterator[None]:
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise ProviderConnectionError(
                f"Redis unavailable: {e}",
                operation=operation,
                key=key,
            ) from e
        except RedisError as e:
            raise CacheError(
                f"Redis command failed: {e}",
                operation=operation,
                key=key,
            ) from e

    async def get(self, key: str, *, deserialize: Callable[[Any], Any] | None = None) -> Any | None:
        async with self._translate_errors("get", key):
            raw = await self.client.get(key)

        if raw is None:
            return None

        try:
            return decode_value(raw, deserialize=deserialize)
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
        encoded = encode_value(value, key=key, serialize=serialize)
        async with self._translate_errors("set", key):
            await self.client.set(key, encoded, ex=ttl if ttl and ttl > 0 else None)

    async def has(self, key: str) -> bool:
        async with self._translate_errors("has", key):
            return bool(await self.client.exists(key))

    async def delete(self, key: str) -> None:
        async with self._translate_errors("delete", key):
            await self.client.delete(key)

    async def clear(self) -> None:
        """Flush the configured Redis database (shared with other processes)."""
        async with self._translate_errors("clear"):
            await self.client.flushdb()
