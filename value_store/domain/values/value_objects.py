"""
Value Objects

Immutable tier identifiers and cache outcomes. Distributed cache operations
return a CacheResult instead of raising, so the resolver's fallback logic
depends only on the outcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class CacheTier(str, Enum):
    """Tiers of the fallback chain, fastest first."""

    LOCAL = "local"
    DISTRIBUTED = "distributed"
    DURABLE = "durable"


class CacheStatus(str, Enum):
    """Outcome of a distributed cache operation."""

    HIT = "hit"
    MISS = "miss"
    OK = "ok"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheResult:
    """
    Outcome of one distributed cache call.

    `value` is set for single-key hits, `values` holds the partial mapping
    returned by a multi-get. `error` describes an UNAVAILABLE outcome.
    """

    status: CacheStatus
    value: Optional[str] = None
    values: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def hit(cls, value: str) -> "CacheResult":
        return cls(status=CacheStatus.HIT, value=value)

    @classmethod
    def miss(cls) -> "CacheResult":
        return cls(status=CacheStatus.MISS)

    @classmethod
    def ok(cls) -> "CacheResult":
        return cls(status=CacheStatus.OK)

    @classmethod
    def found(cls, values: Dict[str, str]) -> "CacheResult":
        """Multi-get outcome; an empty mapping is still OK, not a miss."""
        return cls(status=CacheStatus.OK, values=dict(values))

    @classmethod
    def unavailable(cls, error: str) -> "CacheResult":
        return cls(status=CacheStatus.UNAVAILABLE, error=error)

    @property
    def is_hit(self) -> bool:
        return self.status == CacheStatus.HIT

    @property
    def is_miss(self) -> bool:
        return self.status == CacheStatus.MISS

    @property
    def is_unavailable(self) -> bool:
        return self.status == CacheStatus.UNAVAILABLE
