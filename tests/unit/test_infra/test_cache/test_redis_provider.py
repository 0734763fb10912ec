"""Tests for the Redis cache provider with a mocked client."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from collective_service.core.exceptions import (
    CacheError,
    ConfigurationError,
    ProviderConnectionError,
    SerializationError,
)
from collective_service.core.settings.redis import RedisSettings
from collective_service.infra.cache.providers.redis import RedisProvider


@pytest.fixture
def provider(mock_redis: AsyncMock) -> RedisProvider:
    return RedisProvider(client=mock_redis)


@pytest.mark.unit
class TestRedisProviderOperations:
    """Commands sent to Redis and values decoded from it."""

    async def test_get_decodes_json(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        mock_redis.get.return_value = '{"x": 1}'

        assert await provider.get("b") == {"x": 1}
        mock_redis.get.assert_awaited_once_with("b")

    async def test_get_missing_returns_none(self, provider: RedisProvider) -> None:
        assert await provider.get("missing") is None

    async def test_get_undecodable_value_is_miss(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        mock_redis.get.return_value = "not json {"

        assert await provider.get("k") is None

    async def test_get_with_custom_deserializer(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        mock_redis.get.return_value = "a,b,c"

        assert await provider.get("k", deserialize=lambda raw: raw.split(",")) == ["a", "b", "c"]

    async def test_set_encodes_json_with_ttl(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        await provider.set("b", {"x": 1}, 60)

        mock_redis.set.assert_awaited_once_with("b", json.dumps({"x": 1}), ex=60)

    async def test_set_without_ttl_never_expires(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        await provider.set("a", 42, 0)

        mock_redis.set.assert_awaited_once_with("a", "42", ex=None)

    async def test_set_with_custom_serializer(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        await provider.set("a", ["x", "y"], serialize=",".join)

        mock_redis.set.assert_awaited_once_with("a", "x,y", ex=None)

    async def test_has_uses_exists(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        mock_redis.exists.return_value = 1

        assert await provider.has("a") is True
        mock_redis.exists.assert_awaited_once_with("a")

    async def test_delete(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        mock_redis.delete.return_value = 0

        await provider.delete("absent")

        mock_redis.delete.assert_awaited_once_with("absent")

    async def test_clear_flushes_database(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        await provider.clear()

        mock_redis.flushdb.assert_awaited_once()


@pytest.mark.unit
class TestRedisProviderStoredValues:
    """Values written through the provider read back from the same client."""

    @pytest.fixture
    def stored(self, redis_store_client: AsyncMock) -> RedisProvider:
        return RedisProvider(client=redis_store_client)

    async def test_round_trip(self, stored: RedisProvider, redis_store_client: AsyncMock) -> None:
        value = {"slug": "acme", "tags": ["open", "source"], "balance": 12}

        await stored.set("account", value, 60)

        assert await stored.get("account") == value
        assert await stored.has("account") is True
        assert redis_store_client.store["account"] == json.dumps(value)

    async def test_delete_then_get_is_absent(self, stored: RedisProvider) -> None:
        await stored.set("a", 1, 0)

        await stored.delete("a")

        assert await stored.get("a") is None
        assert await stored.has("a") is False

    async def test_clear_empties_keyspace(self, stored: RedisProvider, redis_store_client: AsyncMock) -> None:
        await stored.set("a", 1, 0)
        await stored.set("b", 2, 0)

        await stored.clear()

        assert redis_store_client.store == {}
        assert await stored.get("b") is None


@pytest.mark.unit
class TestRedisProviderErrors:
    """redis-py exceptions are mapped onto the cache error taxonomy."""

    @pytest.mark.parametrize("exc", [RedisConnectionError("refused"), RedisTimeoutError("timed out")])
    async def test_network_errors_become_connection_errors(
        self, provider: RedisProvider, mock_redis: AsyncMock, exc: Exception
    ) -> None:
        mock_redis.set.side_effect = exc

        with pytest.raises(ProviderConnectionError) as excinfo:
            await provider.set("k", 1)

        assert excinfo.value.key == "k"
        assert excinfo.value.operation == "set"

    async def test_other_redis_errors_become_cache_errors(
        self, provider: RedisProvider, mock_redis: AsyncMock
    ) -> None:
        mock_redis.get.side_effect = ResponseError("WRONGTYPE")

        with pytest.raises(CacheError) as excinfo:
            await provider.get("k")

        assert not isinstance(excinfo.value, ProviderConnectionError)

    async def test_unencodable_value_raises_serialization_error(self, provider: RedisProvider) -> None:
        with pytest.raises(SerializationError):
            await provider.set("k", object())


@pytest.mark.unit
class TestRedisProviderLifecycle:
    """Client construction from settings and shutdown."""

    async def test_connect_builds_client_from_url(self) -> None:
        settings = RedisSettings(server_url="redis://cache:6379/2")
        provider = RedisProvider(settings)

        with patch("collective_service.infra.cache.providers.redis.Redis.from_url") as from_url:
            from_url.return_value = AsyncMock()
            await provider.connect()

        from_url.assert_called_once()
        assert from_url.call_args.args == ("redis://cache:6379/2",)
        assert from_url.call_args.kwargs["decode_responses"] is True

    async def test_connect_without_url_is_configuration_error(self) -> None:
        provider = RedisProvider(RedisSettings())

        with pytest.raises(ConfigurationError):
            await provider.connect()

    async def test_injected_client_is_not_closed(self, provider: RedisProvider, mock_redis: AsyncMock) -> None:
        await provider.disconnect()

        mock_redis.aclose.assert_not_awaited()

    async def test_owned_client_is_closed(self) -> None:
        client = AsyncMock()
        provider = RedisProvider(RedisSettings(server_url="redis://cache:6379/0"))
        with patch("collective_service.infra.cache.providers.redis.Redis.from_url", return_value=client):
            await provider.connect()

        await provider.disconnect()

        client.aclose.assert_awaited_once()

    async def test_client_before_connect_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            _ = RedisProvider(RedisSettings()).client
