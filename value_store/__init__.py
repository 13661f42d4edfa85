"""
Value Store

Named string values resolved through a process-local cache, Redis and a SQL
database, with write-once administration.
"""

from .constants import APP_VERSION as __version__
from .domain.values import (
    BackendUnavailableException,
    Entry,
    ValueAlreadyExistsException,
    ValueStoreException,
)
from .services.values import ValueHandle, ValueRegistry, ValueResolver

__all__ = [
    "__version__",
    "BackendUnavailableException",
    "Entry",
    "ValueAlreadyExistsException",
    "ValueStoreException",
    "ValueHandle",
    "ValueRegistry",
    "ValueResolver",
]
