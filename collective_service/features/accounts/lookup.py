"""Cache-aside lookup of account ids by slug."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from collective_service.core.settings import get_cache_settings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from collective_service.infra.cache.facade import Cache

logger = logging.getLogger(__name__)

ACCOUNT_ID_KEY_PREFIX = "collective_id_with_slug_"


def account_id_cache_key(slug: str) -> str:
    return f"{ACCOUNT_ID_KEY_PREFIX}{slug}"


async def fetch_account_id(
    cache: Cache,
    slug: str,
    loader: Callable[[str], Awaitable[int | None]],
    *,
    ttl: int | None = None,
) -> int | None:
    """Return the id of the account with ``slug``, using the cache first.

    The cache key uses the slug as given; the loader receives it lower-cased,
    since slugs are stored lower-case. Unknown slugs are not cached, so an
    account created later is found on the next call.

    Args:
        cache: Cache facade.
        slug: Account slug.
        loader: Looks up an id by slug in the database; returns None when
            no such account exists.
        ttl: Cache TTL in seconds (default: ``CACHE_ACCOUNT_ID_TTL``, one day).
    """
    cache_key = account_id_cache_key(slug)
    account_id = await cache.get(cache_key)
    if account_id:
        return account_id

    account_id = await loader(slug.lower())
    if account_id is None:
        logger.debug("No account found for slug", extra={"account_slug": slug})
        return None

    if ttl is None:
        ttl = get_cache_settings().account_id_ttl
    await cache.set(cache_key, account_id, ttl)
    return account_id
