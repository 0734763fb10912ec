"""Tests for the cache facade.

Tests cover:
- Delegation to the resolved provider
- Lazy, one-time provider resolution (including concurrent first use)
- Error isolation: warnings, None results, Degraded tagged results
- ConfigurationError staying fatal
"""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from collective_service.core.exceptions import ConfigurationError
from collective_service.core.settings.redis import RedisSettings
from collective_service.infra.cache import (
    Cache,
    Degraded,
    MemoryProvider,
    Ok,
    ProviderSettings,
    RedisProvider,
)
from collective_service.infra.metrics import REGISTRY


@pytest.mark.unit
class TestCacheDelegation:
    """Plain operations on a healthy provider."""

    async def test_scenario_without_and_with_ttl(self, cache: Cache, clock) -> None:
        await cache.set("a", 42, 0)
        assert await cache.get("a") == 42

        await cache.set("b", {"x": 1}, 60)
        assert await cache.get("b") == {"x": 1}

        clock.advance(61)
        assert await cache.get("b") is None

    async def test_delete_then_get_is_absent(self, cache: Cache) -> None:
        await cache.set("a", 1)
        await cache.delete("a")
        await cache.delete("a")

        assert await cache.get("a") is None

    async def test_has_and_clear(self, cache: Cache) -> None:
        await cache.set("a", 1)
        assert await cache.has("a") is True

        await cache.clear()
        assert await cache.has("a") is False

    async def test_result_variants_are_ok(self, cache: Cache) -> None:
        assert await cache.set_result("a", 1) == Ok(None)
        assert await cache.get_result("a") == Ok(1)
        assert await cache.get_result("missing") == Ok(None)
        assert await cache.has_result("a") == Ok(True)


@pytest.mark.unit
class TestProviderResolution:
    """The provider is built once and reused."""

    async def test_resolves_memory_from_settings(self) -> None:
        cache = Cache(settings=ProviderSettings.from_env())

        assert cache.provider_name is None
        await cache.set("a", 1)

        assert cache.provider_name == "memory"
        assert isinstance(await cache.get_provider(), MemoryProvider)

    async def test_provider_is_memoized(self) -> None:
        cache = Cache()

        first = await cache.get_provider()
        second = await cache.get_provider()

        assert first is second

    async def test_concurrent_first_use_builds_one_provider(self) -> None:
        cache = Cache()
        with patch(
            "collective_service.infra.cache.facade.make_provider",
            side_effect=lambda *args, **kwargs: MemoryProvider(),
        ) as factory:
            providers = await asyncio.gather(*(cache.get_provider() for _ in range(10)))

        assert factory.call_count == 1
        assert len({id(p) for p in providers}) == 1

    async def test_forced_provider_type(self) -> None:
        settings = ProviderSettings(redis=RedisSettings(server_url="redis://cache:6379/0"))
        cache = Cache(settings=settings, provider_type="memory")

        assert isinstance(await cache.get_provider(), MemoryProvider)

    async def test_configuration_error_is_fatal(self) -> None:
        cache = Cache(provider_type="DISK")

        with pytest.raises(ConfigurationError):
            await cache.get("a")

    @pytest.mark.parametrize(
        ("env_var", "raw"),
        [("REDIS_SERVER_URL", "http://cache:6379"), ("MEMCACHE_SERVERS", "cache-1:notaport")],
    )
    async def test_invalid_env_settings_are_configuration_errors(
        self,
        monkeypatch: pytest.MonkeyPatch,
        env_var: str,
        raw: str,
    ) -> None:
        monkeypatch.setenv(env_var, raw)
        cache = Cache()

        with pytest.raises(ConfigurationError, match="Invalid cache configuration"):
            await cache.get("a")
        assert cache.provider_name is None

    async def test_aclose_disconnects_provider(self) -> None:
        provider = AsyncMock(spec=MemoryProvider)
        provider.name = "memory"
        cache = Cache(provider)
        await cache.get_provider()

        await cache.aclose()

        provider.disconnect.assert_awaited_once()
        assert cache.provider_name is None


@pytest.mark.unit
class TestErrorIsolation:
    """Provider failures are logged and absorbed."""

    @pytest.fixture
    def failing_redis(self, mock_redis: AsyncMock) -> Cache:
        error = RedisConnectionError("Connection refused")
        for name in ("get", "set", "exists", "delete", "flushdb"):
            getattr(mock_redis, name).side_effect = error
        return Cache(RedisProvider(client=mock_redis))

    async def test_set_connection_error_warns_with_key(
        self, failing_redis: Cache, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="collective_service.infra.cache.facade"):
            result = await failing_redis.set("collective_id_with_slug_acme", 7, 60)

        assert result is None
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "collective_id_with_slug_acme" in warnings[0].getMessage()
        assert warnings[0].cache_key == "collective_id_with_slug_acme"

    async def test_get_failure_is_a_miss(self, failing_redis: Cache) -> None:
        assert await failing_redis.get("a") is None

    async def test_has_failure_is_absent(self, failing_redis: Cache) -> None:
        assert await failing_redis.has("a") is None

    async def test_delete_and_clear_complete(self, failing_redis: Cache) -> None:
        await failing_redis.delete("a")
        await failing_redis.clear()

    async def test_degraded_result_carries_reason(self, failing_redis: Cache) -> None:
        result = await failing_redis.set_result("a", 1)

        assert isinstance(result, Degraded)
        assert result.degraded is True
        assert result.reason.operation == "set"
        assert result.reason.key == "a"
        assert result.reason.error_kind == "provider-connection"

    async def test_unexpected_exception_is_absorbed(self, caplog: pytest.LogCaptureFixture) -> None:
        cache = Cache(MemoryProvider())

        with caplog.at_level(logging.WARNING):
            await cache.set("a", 1)
            result = await cache.get_result("a", deserialize=lambda raw: 1 / 0)

        assert isinstance(result, Degraded)
        assert result.reason.error_kind == "ZeroDivisionError"
        assert "Error while fetching from cache key a" in caplog.text

    async def test_errors_are_counted(self, failing_redis: Cache) -> None:
        labels = {"cache_name": "redis", "operation": "delete", "error_kind": "provider-connection"}
        before = REGISTRY.get_sample_value("cache_errors_total", labels) or 0.0

        await failing_redis.delete("a")

        assert REGISTRY.get_sample_value("cache_errors_total", labels) == before + 1
