"""Cascading cache invalidation for accounts.

When an account changes, everything derived from it has to go:

- its CDN page (``/<slug>``), through a ``PagePurger``
- the GraphQL responses recorded in its invalidation set,
  ``graphqlCacheKeys_<slug>``
- derived caches owned elsewhere, such as contributors, through
  ``DerivedCacheOwner.invalidate``

The steps are independent. Each one is attempted even if an earlier one
failed, and failures are logged and reported rather than raised. Purges are
not atomic; every step is idempotent and safe to retry.

Example:
    invalidator = CacheInvalidator(cache, page_purger=cdn, contributors=contributors)

    # Response caching middleware records what it stores
    await invalidator.record_graphql_cache_key("acme", "graphql_query_1f3a...")

    # After a mutation on the account
    report = await invalidator.purge_all_caches_for_account(account)
    if not report.ok:
        logger.info("Partial purge", extra={"failed": report.failed_steps})
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from collective_service.core.exceptions import ConfigurationError
from collective_service.infra.logging.context import log_context
from collective_service.infra.metrics.tracking import track_invalidated_keys, track_purge_step

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from collective_service.infra.cache.facade import Cache

logger = logging.getLogger(__name__)

GRAPHQL_CACHE_KEYS_PREFIX = "graphqlCacheKeys_"


def graphql_cache_keys_key(slug: str) -> str:
    """Cache key of the invalidation set for an account slug."""
    return f"{GRAPHQL_CACHE_KEYS_PREFIX}{slug}"


@runtime_checkable
class PagePurger(Protocol):
    """Purges a page from the CDN by path."""

    async def purge_page(self, path: str) -> None: ...


@runtime_checkable
class DerivedCacheOwner(Protocol):
    """Owns a cache derived from account data and can drop an account's entries."""

    async def invalidate(self, account_id: int) -> None: ...


class PurgeableAccount(Protocol):
    """The account fields a purge needs."""

    @property
    def id(self) -> int: ...

    @property
    def slug(self) -> str: ...


class NullPagePurger:
    """Page purger for deployments without a CDN; only logs."""

    async def purge_page(self, path: str) -> None:
        logger.info("CDN purge skipped (no CDN configured)", extra={"path": path})


@dataclass(slots=True)
class PurgeReport:
    """Outcome of an account purge."""

    slug: str
    purged_keys: int = 0
    failed_steps: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_steps


class CacheInvalidator:
    """Purges every cache derived from an account.

    Args:
        cache: Cache facade holding the invalidation sets.
        page_purger: CDN collaborator (default: ``NullPagePurger``).
        contributors: Owner of the contributors cache, if any.
    """

    def __init__(
        self,
        cache: Cache,
        *,
        page_purger: PagePurger | None = None,
        contributors: DerivedCacheOwner | None = None,
    ) -> None:
        self.cache = cache
        self.page_purger = page_purger or NullPagePurger()
        self.contributors = contributors

    async def record_graphql_cache_key(self, slug: str, key: str, ttl: int | None = 0) -> None:
        """Add ``key`` to the account's invalidation set (once, in insertion order)."""
        set_key = graphql_cache_keys_key(slug)
        keys = await self.cache.get(set_key) or []
        if key in keys:
            return
        await self.cache.set(set_key, [*keys, key], ttl)

    async def purge_graphql_cache_for_account(self, slug: str) -> int:
        """Delete every key in the account's invalidation set, then the set.

        Returns:
            Number of member keys deleted (0 when no set is recorded).
        """
        set_key = graphql_cache_keys_key(slug)
        keys = await self.cache.get(set_key)
        if not keys:
            logger.debug("No GraphQL cache keys recorded", extra={"account_slug": slug})
            return 0

        for key in keys:
            await self.cache.delete(key)
        await self.cache.delete(set_key)

        track_invalidated_keys(len(keys))
        logger.info(
            "Purged GraphQL cache for account",
            extra={"account_slug": slug, "purged_keys": len(keys)},
        )
        return len(keys)

    async def purge_cache_for_account(self, slug: str) -> PurgeReport:
        """Purge the account's CDN page and its GraphQL cache."""
        report = PurgeReport(slug=slug)
        with log_context(account_slug=slug):
            await self._attempt(report, "cdn", lambda: self.page_purger.purge_page(f"/{slug}"))
            await self._purge_graphql_step(report)
        return report

    async def purge_all_caches_for_account(self, account: PurgeableAccount) -> PurgeReport:
        """Purge the CDN page, the GraphQL cache and the contributors cache."""
        with log_context(account_slug=account.slug, account_id=account.id):
            report = await self.purge_cache_for_account(account.slug)
            if self.contributors is not None:
                contributors = self.contributors
                await self._attempt(report, "contributors", lambda: contributors.invalidate(account.id))

            if report.ok:
                logger.info("Purged all caches for account", extra={"account_slug": account.slug})
            else:
                logger.warning(
                    "Purged caches for account with failures",
                    extra={"account_slug": account.slug, "failed_steps": report.failed_steps},
                )
        return report

    async def _purge_graphql_step(self, report: PurgeReport) -> None:
        async def step() -> None:
            report.purged_keys = await self.purge_graphql_cache_for_account(report.slug)

        await self._attempt(report, "graphql", step)

    async def _attempt(
        self,
        report: PurgeReport,
        step: str,
        call: Callable[[], Awaitable[Any]],
    ) -> None:
        try:
            await call()
        except ConfigurationError:
            raise
        except Exception as e:
            report.failed_steps.append(step)
            track_purge_step(step, success=False)
            logger.warning(
                "Cache purge step %s failed for %s: %s",
                step,
                report.slug,
                e,
                extra={"account_slug": report.slug, "step": step},
            )
            return
        track_purge_step(step, success=True)
