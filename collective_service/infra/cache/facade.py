"""Cache facade with error isolation.

``Cache`` is the single entry point the rest of the service uses. It picks
a provider once (Redis, then Memcache, then in-memory, by configuration),
and runs every operation inside an error boundary: a provider failure is
logged as a warning, counted, and turned into a miss or a dropped write.
A cache outage costs latency, never correctness.

``ConfigurationError`` is the exception. It means the deployment is wrong,
so it propagates out of the first operation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from collective_service.core.exceptions import CacheError, ConfigurationError
from collective_service.infra.cache.providers import (
    ProviderSettings,
    make_provider,
    resolve_provider_type,
)
from collective_service.infra.cache.result import CacheResult, Degraded, DegradedReason, Ok
from collective_service.infra.metrics.tracking import (
    track_cache_error,
    track_cache_lookup,
    track_cache_operation,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from collective_service.infra.cache.providers import CacheProvider, ProviderType

logger = logging.getLogger(__name__)

_WARNINGS = {
    "get": "Error while fetching from cache key %s: %s",
    "set": "Error while writing to cache key %s: %s",
    "has": "Error while checking cache key %s: %s",
    "delete": "Error while deleting from cache key %s: %s",
}


class Cache:
    """Provider-agnostic async key/value cache.

    Example:
        cache = Cache()
        await cache.set("collective_id_with_slug_acme", 42, ttl=86400)
        await cache.get("collective_id_with_slug_acme")  # 42
        await cache.aclose()

    Args:
        provider: Use this provider instead of resolving one from settings.
        settings: Settings used for resolution (default: environment).
        provider_type: Force a backend instead of the precedence rule.
    """

    def __init__(
        self,
        provider: CacheProvider | None = None,
        *,
        settings: ProviderSettings | None = None,
        provider_type: ProviderType | str | None = None,
    ) -> None:
        self._provider = provider
        self._connected = False
        self._settings = settings
        self._provider_type = provider_type
        self._lock = asyncio.Lock()

    @property
    def provider_name(self) -> str | None:
        """Name of the resolved provider, or None before first use."""
        return self._provider.name if self._connected and self._provider else None

    async def get_provider(self) -> CacheProvider:
        """Resolve, connect and memoize the provider.

        Raises:
            ConfigurationError: The provider cannot be built.
        """
        if self._connected and self._provider is not None:
            return self._provider

        async with self._lock:
            if self._connected and self._provider is not None:
                return self._provider

            provider = self._provider
            if provider is None:
                settings = self._settings or ProviderSettings.from_env()
                provider_type = self._provider_type or resolve_provider_type(settings)
                provider = make_provider(provider_type, settings)

            await provider.connect()
            self._provider = provider
            self._connected = True
            logger.info("Cache provider resolved", extra={"provider": provider.name})
            return provider

    async def aclose(self) -> None:
        """Disconnect the provider if it was resolved."""
        if self._provider is not None and self._connected:
            await self._provider.disconnect()
            self._connected = False

    async def _run(
        self,
        operation: str,
        key: str | None,
        call: Callable[[CacheProvider], Awaitable[Any]],
    ) -> CacheResult:
        logger.debug("cache %s %s", operation, key or "")
        try:
            provider = await self.get_provider()
            with track_cache_operation(provider.name, operation):
                value = await call(provider)
        except ConfigurationError:
            raise
        except Exception as e:
            kind = e.kind if isinstance(e, CacheError) else type(e).__name__
            cache_name = self._provider.name if self._provider else "unresolved"
            track_cache_error(cache_name, operation, kind)
            if key is None:
                logger.warning(
                    "Error while clearing cache: %s",
                    e,
                    extra={"operation": operation, "error_kind": kind},
                )
            else:
                logger.warning(
                    _WARNINGS[operation],
                    key,
                    e,
                    extra={"operation": operation, "cache_key": key, "error_kind": kind},
                )
            return Degraded(
                DegradedReason(operation=operation, key=key, error_kind=kind, message=str(e)),
            )
        return Ok(value)

    async def get_result(
        self,
        key: str,
        *,
        deserialize: Callable[[Any], Any] | None = None,
    ) -> CacheResult:
        result = await self._run("get", key, lambda p: p.get(key, deserialize=deserialize))
        track_cache_lookup(
            self._provider.name if self._provider else "unresolved",
            hit=isinstance(result, Ok) and result.value is not None,
        )
        return result

    async def set_result(
        self,
        key: str,
        value: Any,
        ttl: int | None = 0,
        *,
        serialize: Callable[[Any], Any] | None = None,
    ) -> CacheResult:
        return await self._run("set", key, lambda p: p.set(key, value, ttl, serialize=serialize))

    async def has_result(self, key: str) -> CacheResult:
        return await self._run("has", key, lambda p: p.has(key))

    async def delete_result(self, key: str) -> CacheResult:
        return await self._run("delete", key, lambda p: p.delete(key))

    async def clear_result(self) -> CacheResult:
        return await self._run("clear", None, lambda p: p.clear())

    async def get(self, key: str, *, deserialize: Callable[[Any], Any] | None = None) -> Any | None:
        """Return the cached value, or None on a miss or provider failure."""
        return (await self.get_result(key, deserialize=deserialize)).unwrap_or(None)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = 0,
        *,
        serialize: Callable[[Any], Any] | None = None,
    ) -> None:
        """Store a value; ``ttl`` in seconds, 0 means no expiry."""
        await self.set_result(key, value, ttl, serialize=serialize)

    async def has(self, key: str) -> bool | None:
        """Whether ``key`` is cached; None when the provider failed."""
        return (await self.has_result(key)).unwrap_or(None)

    async def delete(self, key: str) -> None:
        await self.delete_result(key)

    async def clear(self) -> None:
        await self.clear_result()
