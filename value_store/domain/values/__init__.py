"""
Values Domain Module

Entities, value objects, exceptions and tier interfaces for tiered value
resolution.
"""

from .entities import Entry, validate_key
from .exceptions import (
    BackendUnavailableException,
    TransactionConflictException,
    ValueAlreadyExistsException,
    ValueStoreException,
)
from .repository_interfaces import (
    DistributedCache,
    DurableStore,
    LocalCache,
    ValueTransaction,
)
from .value_objects import CacheResult, CacheStatus, CacheTier

__all__ = [
    "Entry",
    "validate_key",
    "BackendUnavailableException",
    "TransactionConflictException",
    "ValueAlreadyExistsException",
    "ValueStoreException",
    "DistributedCache",
    "DurableStore",
    "LocalCache",
    "ValueTransaction",
    "CacheResult",
    "CacheStatus",
    "CacheTier",
]
