"""Memoization of async functions through the cache facade.

Example:
    from collective_service.infra.cache.decorators import memoized

    @memoized(cache, key="contributors", max_age=3600)
    async def load_contributors(account_id: int) -> list[dict]:
        return await db.fetch_contributors(account_id)

    # Cached under "contributors_<md5 of [42]>"
    contributors = await load_contributors(42)

    await load_contributors.refresh(42)  # recompute and overwrite
    await load_contributors.clear(42)    # forget this fingerprint only
"""

from __future__ import annotations

from functools import update_wrapper
import hashlib
import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from collective_service.infra.cache.facade import Cache

logger = logging.getLogger(__name__)


def fingerprint(key: str, args: tuple[Any, ...]) -> str:
    """Build the cache key for a memoized call.

    No arguments gives ``key`` itself. Otherwise the MD5 of the compact JSON
    array of the arguments is appended. Object keys are hashed in the order
    given, so ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}`` fingerprint
    differently.

    Raises:
        TypeError: An argument is not JSON serializable.
    """
    if not args:
        return key
    encoded = json.dumps(list(args), separators=(",", ":"), ensure_ascii=False)
    # MD5 used for non-cryptographic cache key hashing
    digest = hashlib.md5(encoded.encode("utf-8")).hexdigest()  # noqa: S324
    return f"{key}_{digest}"


class MemoizedFunction[R]:
    """An async function whose results are cached under a fingerprinted key.

    Calling it returns the cached value when present; otherwise it awaits the
    wrapped function, stores the result with ``max_age`` and returns it.
    ``None`` results are never served from cache. Concurrent misses for the
    same fingerprint may each compute. Exceptions from the wrapped function
    propagate unchanged and nothing is stored.

    Only positional arguments are supported, since they alone make up the
    fingerprint.
    """

    def __init__(
        self,
        func: Callable[..., Awaitable[R]],
        *,
        cache: Cache,
        key: str,
        max_age: int = 0,
        serialize: Callable[[Any], Any] | None = None,
        deserialize: Callable[[Any], Any] | None = None,
    ) -> None:
        if not key:
            msg = "memoize() requires a non-empty key"
            raise ValueError(msg)
        self.func = func
        self.cache = cache
        self.key_prefix = key
        self.max_age = max_age
        self.serialize = serialize
        self.deserialize = deserialize
        update_wrapper(self, func)

    def cache_key(self, *args: Any) -> str:
        return fingerprint(self.key_prefix, args)

    async def _store(self, cache_key: str, value: R) -> None:
        await self.cache.set(cache_key, value, self.max_age, serialize=self.serialize)

    async def __call__(self, *args: Any, **kwargs: Any) -> R:
        _reject_kwargs(kwargs)
        cache_key = self.cache_key(*args)

        value = await self.cache.get(cache_key, deserialize=self.deserialize)
        if value is not None:
            logger.debug("Memoize hit", extra={"cache_key": cache_key})
            return value

        logger.debug("Memoize miss", extra={"cache_key": cache_key})
        value = await self.func(*args)
        await self._store(cache_key, value)
        return value

    async def refresh(self, *args: Any, **kwargs: Any) -> R:
        """Recompute, overwrite the cached value and return it."""
        _reject_kwargs(kwargs)
        cache_key = self.cache_key(*args)
        value = await self.func(*args)
        await self._store(cache_key, value)
        return value

    async def clear(self, *args: Any, **kwargs: Any) -> None:
        """Delete the cached value for these arguments only."""
        _reject_kwargs(kwargs)
        await self.cache.delete(self.cache_key(*args))

    def __repr__(self) -> str:
        return f"<MemoizedFunction {self.key_prefix!r} max_age={self.max_age}>"


def _reject_kwargs(kwargs: dict[str, Any]) -> None:
    if kwargs:
        msg = f"Memoized functions take positional arguments only, got {sorted(kwargs)}"
        raise TypeError(msg)


def memoize[R](
    func: Callable[..., Awaitable[R]],
    *,
    cache: Cache,
    key: str,
    max_age: int = 0,
    serialize: Callable[[Any], Any] | None = None,
    deserialize: Callable[[Any], Any] | None = None,
) -> MemoizedFunction[R]:
    """Wrap ``func`` so its results are cached.

    Args:
        func: Async function to memoize.
        cache: Cache facade to store results in.
        key: Key prefix; the full key is the prefix alone for zero-argument
            calls, else ``<key>_<md5 of JSON args>``.
        max_age: TTL in seconds (0 = no expiry).
        serialize: Applied to results before they are stored.
        deserialize: Applied to stored values when read.

    Returns:
        The memoized function, with ``refresh``, ``clear`` and ``cache_key``.
    """
    return MemoizedFunction(
        func,
        cache=cache,
        key=key,
        max_age=max_age,
        serialize=serialize,
        deserialize=deserialize,
    )


def memoized[R](
    cache: Cache,
    *,
    key: str,
    max_age: int = 0,
    serialize: Callable[[Any], Any] | None = None,
    deserialize: Callable[[Any], Any] | None = None,
) -> Callable[[Callable[..., Awaitable[R]]], MemoizedFunction[R]]:
    """Decorator form of :func:`memoize`."""

    def decorator(func: Callable[..., Awaitable[R]]) -> MemoizedFunction[R]:
        return memoize(
            func,
            cache=cache,
            key=key,
            max_age=max_age,
            serialize=serialize,
            deserialize=deserialize,
        )

    return decorator
