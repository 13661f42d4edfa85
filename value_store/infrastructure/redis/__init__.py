"""
Redis Infrastructure Module

Connection pooling and exceptions for the distributed cache tier.
"""

from .connection_factory import RedisConnectionFactory
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisConfigurationException,
)

__all__ = [
    "RedisConnectionFactory",
    "RedisException",
    "RedisConnectionException",
    "RedisConfigurationException",
]
