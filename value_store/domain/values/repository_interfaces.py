"""
Tier Repository Interfaces

Abstract contracts for the three tiers and the durable transaction handle.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from .entities import Entry
from .value_objects import CacheResult

T = TypeVar("T")


class LocalCache(ABC):
    """In-memory cache private to one process. Never expires."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the cached value or None."""
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store value, overwriting any previous one."""
        pass

    @abstractmethod
    def evict(self, key: str) -> None:
        """Drop key if present."""
        pass


class DistributedCache(ABC):
    """
    Shared best-effort cache without TTLs.

    Implementations MUST NOT raise for backend failures; they return
    CacheResult.unavailable(...) instead.
    """

    @abstractmethod
    async def get(self, key: str) -> CacheResult:
        """HIT with value, MISS, or UNAVAILABLE."""
        pass

    @abstractmethod
    async def get_multi(self, keys: Sequence[str]) -> CacheResult:
        """OK with the partial mapping of found keys, or UNAVAILABLE."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> CacheResult:
        """OK or UNAVAILABLE."""
        pass

    @abstractmethod
    async def set_multi(self, values: Mapping[str, str]) -> CacheResult:
        """OK or UNAVAILABLE."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> CacheResult:
        """OK if removed, MISS if absent, or UNAVAILABLE."""
        pass


class ValueTransaction(ABC):
    """Handle given to a transaction function; scoped to one transaction."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Entry]:
        pass

    @abstractmethod
    async def put(self, entry: Entry) -> None:
        pass


class DurableStore(ABC):
    """
    Source of truth. Failures raise BackendUnavailableException.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Entry]:
        """Return the committed entry or None."""
        pass

    @abstractmethod
    async def get_multi(self, keys: Sequence[str]) -> Dict[str, Entry]:
        """Return entries for the keys that exist."""
        pass

    @abstractmethod
    async def run_in_transaction(
        self, fn: Callable[[ValueTransaction], Awaitable[T]]
    ) -> T:
        """
        Run fn atomically.

        Exceptions raised by fn roll the transaction back and propagate
        unchanged. A concurrent commit of the same key raises
        TransactionConflictException.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete the record. False if it did not exist."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Entry]:
        """Full scan of the namespace, ordered by key."""
        pass
