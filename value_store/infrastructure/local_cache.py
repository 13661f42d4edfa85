"""
Process-local cache tier.

A plain dict owned by one resolver. Entries are never expired; concurrent
writers only ever overwrite a key with the same committed value.
"""

from typing import Dict, Optional

from ..domain.values.repository_interfaces import LocalCache


class ProcessLocalCache(LocalCache):
    """Fastest tier. Lost on process restart."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        self._values[key] = value

    def evict(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
