"""
Value Store Database Models

SQLAlchemy models for the durable tier. One row per (namespace, key).
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..constants import MAX_KEY_LENGTH


class Base(DeclarativeBase):
    """Canonical Base class for all database models."""

    pass


class ValueRecord(Base):
    """Committed value. Immutable once written; removed only by delete."""

    __tablename__ = "stored_values"

    namespace: Mapped[str] = mapped_column(String(100), primary_key=True)
    key: Mapped[str] = mapped_column(String(MAX_KEY_LENGTH), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<ValueRecord(namespace={self.namespace}, key={self.key})>"
