"""
Value Store Exceptions

Domain-specific exceptions for tier operations. Not-found is never an
exception: it is None, CacheStatus.MISS or False depending on the tier.
"""

from typing import Any, Dict, Optional

from .value_objects import CacheTier


class ValueStoreException(Exception):
    """Base exception for value store errors.

    Always preserve the original error as __cause__.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class BackendUnavailableException(ValueStoreException):
    """Raised when a cache or store cannot be reached or fails an operation."""

    def __init__(
        self,
        tier: CacheTier,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        details: Dict[str, Any] = {"tier": tier.value, "operation": operation}
        if key is not None:
            details["key"] = key
        if original_error is not None:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=f"{tier.value} tier unavailable during '{operation}'",
            error_code="BACKEND_UNAVAILABLE",
            details=details,
        )
        self.tier = tier
        if original_error is not None:
            self.__cause__ = original_error


class ValueAlreadyExistsException(ValueStoreException):
    """Raised by write-once admission when the key is already present."""

    def __init__(self, key: str, tier: CacheTier):
        super().__init__(
            message=f"Key {key!r} already exists ({tier.value} tier)",
            error_code="VALUE_ALREADY_EXISTS",
            details={"key": key, "tier": tier.value},
        )
        self.key = key
        self.tier = tier


class TransactionConflictException(ValueStoreException):
    """Raised by the durable store when a concurrent write won the race."""

    def __init__(
        self,
        message: str = "Concurrent write conflict",
        original_error: Optional[BaseException] = None,
    ):
        details: Dict[str, Any] = {}
        if original_error is not None:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="TRANSACTION_CONFLICT", details=details
        )
        if original_error is not None:
            self.__cause__ = original_error
