"""
Tier repository implementations: Redis for the distributed cache,
SQLAlchemy for the durable store.
"""

from .cache_repository import RedisValueCache
from .value_repository import SqlValueStore, SqlValueTransaction

__all__ = ["RedisValueCache", "SqlValueStore", "SqlValueTransaction"]
