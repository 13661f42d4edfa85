"""
Value registry.

Modules declare the named values they need at import time and the
application resolves all of them in one batch at startup:

    DATABASE_PASSWORD = registry.string("database_password")
    ...
    await registry.load(resolver)
    connect(password=str(DATABASE_PASSWORD))
"""

from typing import Dict, List

import structlog

from .value_resolver import ValueResolver

logger = structlog.get_logger(__name__)


class ValueHandle:
    """A declared value. Reads as "" until the registry is loaded."""

    def __init__(self, key: str):
        self.key = key
        self.value = ""

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"ValueHandle(key={self.key!r}, loaded={bool(self.value)})"


class ValueRegistry:
    def __init__(self):
        self._handles: Dict[str, ValueHandle] = {}

    def string(self, key: str) -> ValueHandle:
        """Declare a value. Declaring the same key twice returns the same handle."""
        handle = self._handles.get(key)
        if handle is None:
            handle = ValueHandle(key)
            self._handles[key] = handle
        return handle

    def keys(self) -> List[str]:
        return list(self._handles)

    async def load(self, resolver: ValueResolver) -> Dict[str, str]:
        """Resolve every declared key with a single get_multi call."""
        values = await resolver.get_multi(self.keys())
        for key, handle in self._handles.items():
            handle.value = values.get(key, "")

        unresolved = [key for key, value in values.items() if not value]
        if unresolved:
            logger.warning("Declared values not resolved", keys=unresolved)
        logger.info(
            "Value registry loaded",
            declared=len(self._handles),
            resolved=len(self._handles) - len(unresolved),
        )
        return values
