"""
Unit tests for the Redis distributed cache repository.

The Redis client is an AsyncMock; the repository must turn every client
failure into an UNAVAILABLE outcome instead of raising.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from value_store.domain.values.value_objects import CacheStatus
from value_store.infrastructure.repositories.cache_repository import RedisValueCache

from tests.fakes import FakeRedisConnectionFactory


class TestRedisValueCache:
    @pytest.fixture
    def redis_client(self):
        return AsyncMock()

    @pytest.fixture
    def cache(self, redis_client):
        return RedisValueCache(FakeRedisConnectionFactory(redis_client), key_prefix="vs:")

    @pytest.mark.asyncio
    async def test_get_hit(self, cache, redis_client):
        redis_client.get.return_value = "s3cr3t"

        result = await cache.get("api_key")

        assert result.status == CacheStatus.HIT
        assert result.value == "s3cr3t"
        redis_client.get.assert_awaited_once_with("vs:api_key")

    @pytest.mark.asyncio
    async def test_get_miss(self, cache, redis_client):
        redis_client.get.return_value = None

        result = await cache.get("api_key")

        assert result.is_miss

    @pytest.mark.asyncio
    async def test_get_connection_error_is_unavailable(self, cache, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")

        result = await cache.get("api_key")

        assert result.is_unavailable
        assert "refused" in result.error

    @pytest.mark.asyncio
    async def test_get_multi_returns_only_found(self, cache, redis_client):
        redis_client.mget.return_value = ["1", None, "3"]

        result = await cache.get_multi(["a", "b", "c"])

        assert result.status == CacheStatus.OK
        assert result.values == {"a": "1", "c": "3"}
        redis_client.mget.assert_awaited_once_with(["vs:a", "vs:b", "vs:c"])

    @pytest.mark.asyncio
    async def test_get_multi_empty_skips_redis(self, cache, redis_client):
        result = await cache.get_multi([])

        assert result.values == {}
        redis_client.mget.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_multi_timeout_is_unavailable(self, cache, redis_client):
        redis_client.mget.side_effect = RedisTimeoutError("timed out")

        result = await cache.get_multi(["a"])

        assert result.is_unavailable
        assert result.values == {}

    @pytest.mark.asyncio
    async def test_set_without_expiry(self, cache, redis_client):
        result = await cache.set("api_key", "s3cr3t")

        assert result.status == CacheStatus.OK
        redis_client.set.assert_awaited_once_with("vs:api_key", "s3cr3t")

    @pytest.mark.asyncio
    async def test_set_failure_is_unavailable(self, cache, redis_client):
        redis_client.set.side_effect = RedisConnectionError("refused")

        assert (await cache.set("api_key", "s3cr3t")).is_unavailable

    @pytest.mark.asyncio
    async def test_set_multi(self, cache, redis_client):
        result = await cache.set_multi({"a": "1", "b": "2"})

        assert result.status == CacheStatus.OK
        redis_client.mset.assert_awaited_once_with({"vs:a": "1", "vs:b": "2"})

    @pytest.mark.asyncio
    async def test_set_multi_empty_skips_redis(self, cache, redis_client):
        await cache.set_multi({})

        redis_client.mset.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_existing(self, cache, redis_client):
        redis_client.delete.return_value = 1

        assert (await cache.delete("api_key")).status == CacheStatus.OK
        redis_client.delete.assert_awaited_once_with("vs:api_key")

    @pytest.mark.asyncio
    async def test_delete_missing(self, cache, redis_client):
        redis_client.delete.return_value = 0

        assert (await cache.delete("api_key")).is_miss

    @pytest.mark.asyncio
    async def test_delete_failure_is_unavailable(self, cache, redis_client):
        redis_client.delete.side_effect = RedisConnectionError("refused")

        assert (await cache.delete("api_key")).is_unavailable

    @pytest.mark.asyncio
    async def test_no_prefix(self, redis_client):
        cache = RedisValueCache(FakeRedisConnectionFactory(redis_client))
        redis_client.get.return_value = None

        await cache.get("api_key")

        redis_client.get.assert_awaited_once_with("api_key")
