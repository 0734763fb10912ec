"""Cache provider backends."""

from __future__ import annotations

from collective_service.infra.cache.providers.base import CacheProvider, ProviderType
from collective_service.infra.cache.providers.factory import (
    ProviderSettings,
    make_provider,
    resolve_provider_type,
)
from collective_service.infra.cache.providers.memcache import MemcacheProvider
from collective_service.infra.cache.providers.memory import CacheEntry, MemoryProvider
from collective_service.infra.cache.providers.redis import RedisProvider

__all__ = [
    "CacheEntry",
    "CacheProvider",
    "MemcacheProvider",
    "MemoryProvider",
    "ProviderSettings",
    "ProviderType",
    "RedisProvider",
    "make_provider",
    "resolve_provider_type",
]
