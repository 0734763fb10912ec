"""Process-wide application context.

The context is built once at startup and handed to whatever needs the
cache, instead of the cache living in a module global. It owns exactly one
``Cache`` (hence one resolved provider per process) and the invalidator
wired to it.

Startup:
    context = await create_app_context()

Shutdown:
    await context.aclose()

Or, for scripts and the CLI:
    async with app_context() as context:
        await context.cache.get("key")
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from collective_service.features.contributors import ContributorsCache
from collective_service.infra.cache import Cache, CacheInvalidator, ProviderSettings
from collective_service.infra.logging.config import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from collective_service.infra.cache import CacheProvider, PagePurger, ProviderType

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    """Long-lived services shared by the whole process."""

    cache: Cache
    invalidator: CacheInvalidator
    contributors: ContributorsCache | None = None

    async def aclose(self) -> None:
        """Release the cache provider's connections."""
        await self.cache.aclose()
        logger.info("Application context closed")


async def create_app_context(
    settings: ProviderSettings | None = None,
    *,
    provider: CacheProvider | None = None,
    provider_type: ProviderType | str | None = None,
    page_purger: PagePurger | None = None,
    contributors_loader: Callable[[int], Awaitable[list[dict[str, Any]]]] | None = None,
    configure_logging: bool = True,
) -> AppContext:
    """Build the application context and resolve the cache provider.

    Resolving eagerly means configuration mistakes (``ConfigurationError``)
    surface at startup instead of on the first request.

    Args:
        settings: Provider settings (default: environment).
        provider: Use this provider instead of resolving one.
        provider_type: Force a backend instead of the precedence rule.
        page_purger: CDN collaborator for account purges.
        contributors_loader: Loads contributors for an account id; enables
            the contributors cache and its invalidation on purges.
        configure_logging: Run ``setup_logging()`` first.
    """
    if configure_logging:
        setup_logging()

    cache = Cache(
        provider,
        settings=settings or ProviderSettings.from_env(),
        provider_type=provider_type,
    )
    await cache.get_provider()

    contributors = None
    if contributors_loader is not None:
        contributors = ContributorsCache(cache, contributors_loader)

    context = AppContext(
        cache=cache,
        invalidator=CacheInvalidator(cache, page_purger=page_purger, contributors=contributors),
        contributors=contributors,
    )
    logger.info("Application context ready", extra={"provider": cache.provider_name})
    return context


@asynccontextmanager
async def app_context(**kwargs: Any) -> AsyncIterator[AppContext]:
    """Create an application context and close it on exit."""
    context = await create_app_context(**kwargs)
    try:
        yield context
    finally:
        await context.aclose()
