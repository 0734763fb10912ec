"""Pytest configuration and shared fixtures.

Organization:
    - Environment: keep tests off real Redis/Memcache servers
    - Clock: controllable time source for expiry tests
    - Cache Fixtures: memory-backed facade and mocked network clients
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from unittest.mock import AsyncMock

import pytest

# Ensure tests run without external infrastructure
os.environ["REDIS_SERVER_URL"] = ""
os.environ["MEMCACHE_SERVERS"] = ""
os.environ.setdefault("LOG_JSON_LOGS", "false")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from collective_service.core.settings import clear_all_caches  # noqa: E402
from collective_service.infra.cache import Cache, MemoryProvider  # noqa: E402
from collective_service.infra.logging.context import clear_log_context  # noqa: E402


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_settings_and_context() -> Iterator[None]:
    """Reload settings for every test and drop leftover log context."""
    clear_all_caches()
    clear_log_context()
    yield
    clear_all_caches()
    clear_log_context()


# ============================================================================
# Clock Fixtures
# ============================================================================


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def memory_provider(clock: FakeClock) -> MemoryProvider:
    """Small LRU provider driven by the fake clock."""
    return MemoryProvider(max_entries=3, clock=clock)


@pytest.fixture
async def cache(memory_provider: MemoryProvider) -> AsyncIterator[Cache]:
    """Cache facade backed by the in-memory provider.

    Example:
        async def test_roundtrip(cache):
            await cache.set("a", 1)
            assert await cache.get("a") == 1
    """
    facade = Cache(memory_provider)
    yield facade
    await facade.aclose()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Mock ``redis.asyncio.Redis`` client with an empty keyspace.

    Provides:
    - get/set/exists/delete for key operations
    - flushdb for clear
    - aclose for disconnect
    """
    redis_mock = AsyncMock()
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock(return_value=True)
    redis_mock.exists = AsyncMock(return_value=0)
    redis_mock.delete = AsyncMock(return_value=1)
    redis_mock.flushdb = AsyncMock(return_value=True)
    redis_mock.aclose = AsyncMock(return_value=None)
    return redis_mock


@pytest.fixture
def redis_store_client() -> AsyncMock:
    """Mock ``redis.asyncio.Redis`` client backed by a dict.

    Unlike ``mock_redis`` it remembers writes, so values set through a
    provider can be read back. The dict is exposed as ``.store``.
    """
    store: dict[str, str] = {}
    client = AsyncMock()

    async def get(key: str) -> str | None:
        return store.get(key)

    async def set_(key: str, value: str, ex: int | None = None) -> bool:
        store[key] = value
        return True

    async def exists(*keys: str) -> int:
        return sum(1 for key in keys if key in store)

    async def delete(*keys: str) -> int:
        return sum(1 for key in keys if store.pop(key, None) is not None)

    async def flushdb() -> bool:
        store.clear()
        return True

    client.get = AsyncMock(side_effect=get)
    client.set = AsyncMock(side_effect=set_)
    client.exists = AsyncMock(side_effect=exists)
    client.delete = AsyncMock(side_effect=delete)
    client.flushdb = AsyncMock(side_effect=flushdb)
    client.aclose = AsyncMock(return_value=None)
    client.store = store
    return client


@pytest.fixture
def mock_memcache_clients() -> list[AsyncMock]:
    """Two mocked ``aiomcache.Client`` instances backed by one dict each."""
    clients: list[AsyncMock] = []
    for _ in range(2):
        store: dict[bytes, bytes] = {}
        client = AsyncMock()

        async def get(key: bytes, default: bytes | None = None, _store: dict[bytes, bytes] = store) -> bytes | None:
            return _store.get(key, default)

        async def set_(key: bytes, value: bytes, exptime: int = 0, _store: dict[bytes, bytes] = store) -> bool:
            _store[key] = value
            return True

        async def delete(key: bytes, _store: dict[bytes, bytes] = store) -> bool:
            return _store.pop(key, None) is not None

        async def flush_all(_store: dict[bytes, bytes] = store) -> None:
            _store.clear()

        client.get = AsyncMock(side_effect=get)
        client.set = AsyncMock(side_effect=set_)
        client.delete = AsyncMock(side_effect=delete)
        client.flush_all = AsyncMock(side_effect=flush_all)
        client.close = AsyncMock(return_value=None)
        client.store = store
        clients.append(client)
    return clients
