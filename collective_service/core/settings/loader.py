"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process, which is what gives the cache provider selection its "resolved once
per process" behaviour.

Usage:
    from collective_service.core.settings.loader import get_redis_settings

    settings = get_redis_settings()  # First call: loads and validates
    settings = get_redis_settings()  # Subsequent calls: cached instance

Testing:
    Clear the caches to force a reload:
    clear_all_caches()
"""

from __future__ import annotations

from functools import lru_cache

from .cache import CacheSettings
from .logs import LoggingSettings
from .memcache import MemcacheSettings
from .redis import RedisSettings


@lru_cache(maxsize=1)
def get_cache_settings() -> CacheSettings:
    """Get cached cache layer settings.

    Returns:
        Validated and frozen CacheSettings instance.
    """
    return CacheSettings()


@lru_cache(maxsize=1)
def get_redis_settings() -> RedisSettings:
    """Get cached Redis settings.

    Returns:
        Validated and frozen RedisSettings instance.
    """
    return RedisSettings()


@lru_cache(maxsize=1)
def get_memcache_settings() -> MemcacheSettings:
    """Get cached Memcache settings.

    Returns:
        Validated and frozen MemcacheSettings instance.
    """
    return MemcacheSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing. In production, prefer process restarts over cache
    clearing.
    """
    get_cache_settings.cache_clear()
    get_redis_settings.cache_clear()
    get_memcache_settings.cache_clear()
    get_logging_settings.cache_clear()
