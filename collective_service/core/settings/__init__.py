"""Modular Pydantic Settings v2 configuration.

Each domain has its own settings model with its own environment prefix:

- ``CACHE_``: provider-independent cache settings
- ``REDIS_``: Redis provider connection
- ``MEMCACHE_``: Memcache provider servers
- ``LOG_``: logging

Import settings via the cached loaders:
    from collective_service.core.settings import get_redis_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .cache import CacheSettings
from .loader import (
    clear_all_caches,
    get_cache_settings,
    get_logging_settings,
    get_memcache_settings,
    get_redis_settings,
)
from .logs import LoggingSettings
from .memcache import MemcacheSettings
from .redis import RedisSettings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "MemcacheSettings",
    "RedisSettings",
    "clear_all_caches",
    "get_cache_settings",
    "get_logging_settings",
    "get_memcache_settings",
    "get_redis_settings",
]
