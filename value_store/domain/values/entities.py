"""
Value Entities

The only entity is Entry: one committed key/value pair.
"""

from dataclasses import dataclass

from ...constants import MAX_KEY_LENGTH


@dataclass(frozen=True)
class Entry:
    """
    A committed value.

    Keys are chosen by an administrator; values are opaque strings. For a
    given key at most one Entry is ever committed until it is deleted.

    Stored rows are loaded as-is; only create() validates.
    """

    key: str
    value: str

    @classmethod
    def create(cls, key: str, value: str) -> "Entry":
        """Build a new entry for admission, validating key format and value type."""
        validate_key(key)

        if not isinstance(value, str):
            raise ValueError(f"Value must be a string, got {type(value).__name__}")

        return cls(key=key, value=value)


def validate_key(key: str) -> str:
    """Return key unchanged or raise ValueError."""
    if not isinstance(key, str):
        raise ValueError(f"Key must be a string, got {type(key).__name__}")

    if not key:
        raise ValueError("Key cannot be empty")

    if len(key) > MAX_KEY_LENGTH:
        raise ValueError(f"Key too long (max {MAX_KEY_LENGTH} characters)")

    if key != key.strip():
        raise ValueError("Key cannot start or end with whitespace")

    return key
