"""
Redis Connection Factory

Connection pool management for the distributed cache tier.
Connections are opened lazily; an unreachable Redis at startup is logged but
does not stop the service, since the tier is best-effort.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from ...core.config import Settings, get_settings
from .exceptions import RedisConfigurationException, RedisConnectionException

logger = structlog.get_logger(__name__)


class RedisConnectionFactory:
    """Creates one shared connection pool and hands out clients bound to it."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return

        async with self._lock:
            if self._pool is not None:
                return

            try:
                self._pool = ConnectionPool.from_url(
                    self.settings.REDIS_URL,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=self.settings.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=self.settings.REDIS_CONNECTION_TIMEOUT,
                    socket_timeout=self.settings.REDIS_OPERATION_TIMEOUT,
                )
            except ValueError as e:
                raise RedisConfigurationException(
                    message=f"Invalid Redis configuration: {e}",
                    config_key="REDIS_URL",
                    original_error=e,
                ) from e

            self._client = Redis(connection_pool=self._pool)
            logger.info(
                "Redis connection factory initialized",
                max_connections=self.settings.REDIS_MAX_CONNECTIONS,
            )

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[Redis]:
        """
        Yield a Redis client bound to the shared pool.

        Raises:
            RedisConnectionException: If the pool cannot be created
        """
        if self._client is None:
            try:
                await self.initialize()
            except RedisConfigurationException as e:
                raise RedisConnectionException(
                    message="Redis client unavailable", original_error=e
                ) from e

        yield self._client

    async def health_check(self) -> Dict[str, Any]:
        """Ping Redis and report latency."""
        start_time = time.time()
        try:
            async with self.get_connection() as client:
                await client.ping()
        except (RedisError, RedisConnectionException, OSError) as e:
            logger.warning("Redis health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

        return {
            "status": "healthy",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    async def close(self) -> None:
        """Close the client and disconnect the pool."""
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
            if self._pool is not None:
                await self._pool.disconnect()
                self._pool = None
            logger.info("Redis connections closed")
