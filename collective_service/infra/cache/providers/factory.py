"""Cache provider selection and construction."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from pydantic import ValidationError

from collective_service.core.exceptions import ConfigurationError
from collective_service.core.settings import (
    get_cache_settings,
    get_memcache_settings,
    get_redis_settings,
)
from collective_service.core.settings.cache import CacheSettings
from collective_service.core.settings.memcache import MemcacheSettings
from collective_service.core.settings.redis import RedisSettings
from collective_service.infra.cache.providers.base import CacheProvider, ProviderType
from collective_service.infra.cache.providers.memcache import MemcacheProvider
from collective_service.infra.cache.providers.memory import MemoryProvider
from collective_service.infra.cache.providers.redis import RedisProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProviderSettings:
    """The settings needed to pick and build a cache provider."""

    cache: CacheSettings = field(default_factory=CacheSettings)
    redis: RedisSettings = field(default_factory=RedisSettings)
    memcache: MemcacheSettings = field(default_factory=MemcacheSettings)

    @classmethod
    def from_env(cls) -> ProviderSettings:
        """Build from the process-wide cached settings loaders.

        Raises:
            ConfigurationError: A cache setting in the environment is invalid.
        """
        try:
            return cls(
                cache=get_cache_settings(),
                redis=get_redis_settings(),
                memcache=get_memcache_settings(),
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid cache configuration: {e}",
                extra={"settings": e.title, "errors": e.error_count()},
            ) from e


def resolve_provider_type(settings: ProviderSettings) -> ProviderType:
    """Pick the backend: Redis URL first, then Memcache servers, else memory."""
    if settings.redis.is_configured:
        return ProviderType.REDIS
    if settings.memcache.is_configured:
        return ProviderType.MEMCACHE
    return ProviderType.MEMORY


def make_provider(
    provider_type: ProviderType | str,
    settings: ProviderSettings | None = None,
) -> CacheProvider:
    """Build an (unconnected) provider of the requested type.

    Args:
        provider_type: Backend to build; strings are matched case-insensitively.
        settings: Settings to build from. Defaults to the cached env settings.

    Raises:
        ConfigurationError: The provider type is not supported.
    """
    try:
        resolved = ProviderType(str(provider_type).upper())
    except ValueError as e:
        raise ConfigurationError(
            f"Unsupported cache provider: {provider_type}",
            extra={"provider_type": str(provider_type)},
        ) from e

    if settings is None:
        settings = ProviderSettings.from_env()

    logger.debug("Building cache provider", extra={"provider": resolved.value})

    match resolved:
        case ProviderType.REDIS:
            return RedisProvider(settings.redis)
        case ProviderType.MEMCACHE:
            return MemcacheProvider(settings.memcache)
        case ProviderType.MEMORY:
            return MemoryProvider(max_entries=settings.cache.memory_max_entries)
