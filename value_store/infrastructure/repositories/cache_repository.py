"""
Redis Distributed Cache Repository

Infrastructure implementation of the DistributedCache interface using Redis.
Values are stored as plain strings without TTL under `prefix + key`.
Every failure is reported as CacheResult.unavailable; nothing is raised.
"""

import time
from typing import Dict, List, Mapping, Optional, Sequence

import structlog
from opentelemetry import trace

from ...domain.values.repository_interfaces import DistributedCache
from ...domain.values.value_objects import CacheResult
from ..redis.connection_factory import RedisConnectionFactory

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class RedisValueCache(DistributedCache):
    """Redis implementation of the distributed cache tier."""

    def __init__(
        self,
        connection_factory: RedisConnectionFactory,
        key_prefix: str = "",
    ):
        self.connection_factory = connection_factory
        self.key_prefix = key_prefix

    def _cache_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _unavailable(
        self, operation: str, error: Exception, key: Optional[str] = None
    ) -> CacheResult:
        logger.warning(
            "Distributed cache operation failed",
            operation=operation,
            key=key,
            error=str(error),
            error_type=type(error).__name__,
        )
        return CacheResult.unavailable(f"{type(error).__name__}: {error}")

    async def get(self, key: str) -> CacheResult:
        """Get a single value."""
        with tracer.start_as_current_span("redis_value_cache.get") as span:
            span.set_attribute("value.key", key)
            try:
                async with self.connection_factory.get_connection() as redis_client:
                    value = await redis_client.get(self._cache_key(key))
            except Exception as e:
                return self._unavailable("get", e, key)

            span.set_attribute("cache_hit", value is not None)
            if value is None:
                return CacheResult.miss()
            return CacheResult.hit(value)

    async def get_multi(self, keys: Sequence[str]) -> CacheResult:
        """Get many values with one MGET; the result holds only found keys."""
        keys = list(keys)
        if not keys:
            return CacheResult.found({})

        with tracer.start_as_current_span("redis_value_cache.get_multi") as span:
            span.set_attribute("value.key_count", len(keys))
            start_time = time.time()
            try:
                async with self.connection_factory.get_connection() as redis_client:
                    raw: List[Optional[str]] = await redis_client.mget(
                        [self._cache_key(key) for key in keys]
                    )
            except Exception as e:
                return self._unavailable("get_multi", e)

            found: Dict[str, str] = {
                key: value for key, value in zip(keys, raw) if value is not None
            }
            span.set_attribute("value.hit_count", len(found))
            logger.debug(
                "Distributed cache multi-get",
                requested=len(keys),
                found=len(found),
                execution_time_ms=round((time.time() - start_time) * 1000, 2),
            )
            return CacheResult.found(found)

    async def set(self, key: str, value: str) -> CacheResult:
        """Store a value without expiry."""
        try:
            async with self.connection_factory.get_connection() as redis_client:
                await redis_client.set(self._cache_key(key), value)
        except Exception as e:
            return self._unavailable("set", e, key)
        return CacheResult.ok()

    async def set_multi(self, values: Mapping[str, str]) -> CacheResult:
        """Store many values with one MSET."""
        if not values:
            return CacheResult.ok()

        try:
            async with self.connection_factory.get_connection() as redis_client:
                await redis_client.mset(
                    {self._cache_key(key): value for key, value in values.items()}
                )
        except Exception as e:
            return self._unavailable("set_multi", e)
        return CacheResult.ok()

    async def delete(self, key: str) -> CacheResult:
        """Delete a value. MISS when nothing was stored."""
        try:
            async with self.connection_factory.get_connection() as redis_client:
                removed = await redis_client.delete(self._cache_key(key))
        except Exception as e:
            return self._unavailable("delete", e, key)

        if removed == 0:
            return CacheResult.miss()
        return CacheResult.ok()
