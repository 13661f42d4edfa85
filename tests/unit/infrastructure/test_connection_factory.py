"""
Redis connection factory tests.

No Redis server is needed: the tests only cover configuration errors and an
unreachable server.
"""

import pytest

from value_store.core.config import Settings
from value_store.infrastructure.redis.connection_factory import RedisConnectionFactory
from value_store.infrastructure.redis.exceptions import (
    RedisConfigurationException,
    RedisConnectionException,
)
from value_store.infrastructure.repositories.cache_repository import RedisValueCache

SQLITE_URL = "sqlite+aiosqlite:///./test.db"


class TestRedisConnectionFactory:
    @pytest.fixture
    def bad_port_settings(self):
        return Settings(DATABASE_URL=SQLITE_URL, REDIS_URL="redis://localhost:notaport")

    @pytest.fixture
    def unreachable_settings(self):
        return Settings(
            DATABASE_URL=SQLITE_URL,
            REDIS_URL="redis://127.0.0.1:1/0",
            REDIS_CONNECTION_TIMEOUT=0.5,
            REDIS_OPERATION_TIMEOUT=0.5,
        )

    @pytest.mark.asyncio
    async def test_invalid_url_raises_configuration_error(self, bad_port_settings):
        factory = RedisConnectionFactory(bad_port_settings)

        with pytest.raises(RedisConfigurationException) as exc_info:
            await factory.initialize()

        assert exc_info.value.details["config_key"] == "REDIS_URL"

    @pytest.mark.asyncio
    async def test_get_connection_wraps_configuration_error(self, bad_port_settings):
        factory = RedisConnectionFactory(bad_port_settings)

        with pytest.raises(RedisConnectionException):
            async with factory.get_connection():
                pass

    @pytest.mark.asyncio
    async def test_cache_reports_unavailable_for_bad_configuration(
        self, bad_port_settings
    ):
        cache = RedisValueCache(RedisConnectionFactory(bad_port_settings))

        assert (await cache.get("api_key")).is_unavailable

    @pytest.mark.asyncio
    async def test_unreachable_server(self, unreachable_settings):
        factory = RedisConnectionFactory(unreachable_settings)
        try:
            health = await factory.health_check()
            result = await RedisValueCache(factory).get("api_key")
        finally:
            await factory.close()

        assert health["status"] == "unhealthy"
        assert result.is_unavailable
