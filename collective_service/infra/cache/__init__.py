"""Cache infrastructure: providers, facade, memoization and invalidation."""

from __future__ import annotations

from collective_service.infra.cache.decorators import (
    MemoizedFunction,
    fingerprint,
    memoize,
    memoized,
)
from collective_service.infra.cache.facade import Cache
from collective_service.infra.cache.invalidation import (
    CacheInvalidator,
    DerivedCacheOwner,
    NullPagePurger,
    PagePurger,
    PurgeReport,
    graphql_cache_keys_key,
)
from collective_service.infra.cache.providers import (
    CacheProvider,
    MemcacheProvider,
    MemoryProvider,
    ProviderSettings,
    ProviderType,
    RedisProvider,
    make_provider,
    resolve_provider_type,
)
from collective_service.infra.cache.result import CacheResult, Degraded, DegradedReason, Ok

__all__ = [
    "Cache",
    "CacheInvalidator",
    "CacheProvider",
    "CacheResult",
    "Degraded",
    "DegradedReason",
    "DerivedCacheOwner",
    "MemcacheProvider",
    "MemoizedFunction",
    "MemoryProvider",
    "NullPagePurger",
    "Ok",
    "PagePurger",
    "ProviderSettings",
    "ProviderType",
    "PurgeReport",
    "RedisProvider",
    "fingerprint",
    "graphql_cache_keys_key",
    "make_provider",
    "memoize",
    "memoized",
    "resolve_provider_type",
]
