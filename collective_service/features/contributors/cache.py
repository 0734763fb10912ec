"""Per-account contributors cache.

Contributor lists are expensive to compute (they aggregate every
transaction and membership of an account), so they are memoized per account
id under the ``contributors`` key prefix. Account purges invalidate them
through :meth:`ContributorsCache.invalidate`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from collective_service.core.settings import get_cache_settings
from collective_service.infra.cache.decorators import memoize

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from collective_service.infra.cache.facade import Cache

logger = logging.getLogger(__name__)

CONTRIBUTORS_KEY_PREFIX = "contributors"


class ContributorsCache:
    """Memoized contributors lookup keyed by account id.

    Example:
        contributors = ContributorsCache(cache, repository.contributors_for_account)
        await contributors.get(42)          # loads and caches
        await contributors.invalidate(42)   # next get reloads
    """

    def __init__(
        self,
        cache: Cache,
        loader: Callable[[int], Awaitable[list[dict[str, Any]]]],
        *,
        max_age: int | None = None,
    ) -> None:
        if max_age is None:
            max_age = get_cache_settings().contributors_ttl
        self._memoized = memoize(loader, cache=cache, key=CONTRIBUTORS_KEY_PREFIX, max_age=max_age)

    def cache_key(self, account_id: int) -> str:
        return self._memoized.cache_key(account_id)

    async def get(self, account_id: int) -> list[dict[str, Any]]:
        return await self._memoized(account_id)

    async def refresh(self, account_id: int) -> list[dict[str, Any]]:
        return await self._memoized.refresh(account_id)

    async def invalidate(self, account_id: int) -> None:
        logger.debug("Invalidating contributors cache", extra={"account_id": account_id})
        await self._memoized.clear(account_id)
