"""
SQL Durable Store Repository

SQLAlchemy implementation of the DurableStore interface. All records live in
one namespace of the `stored_values` table; the (namespace, key) primary key
makes a concurrent second insert of the same key fail inside its
transaction, which is what write-once admission relies on.
"""

from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.values.entities import Entry
from ...domain.values.exceptions import (
    BackendUnavailableException,
    TransactionConflictException,
)
from ...domain.values.repository_interfaces import DurableStore, ValueTransaction
from ...domain.values.value_objects import CacheTier
from ...models import ValueRecord

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Backend failures that are reported as BackendUnavailableException.
_BACKEND_ERRORS = (SQLAlchemyError, OSError)


def _to_entry(record: ValueRecord) -> Entry:
    return Entry(key=record.key, value=record.value)


class SqlValueTransaction(ValueTransaction):
    """Reads and writes through the session of one open transaction."""

    def __init__(self, session: AsyncSession, namespace: str):
        self.session = session
        self.namespace = namespace

    async def get(self, key: str) -> Optional[Entry]:
        record = await self.session.get(ValueRecord, (self.namespace, key))
        return _to_entry(record) if record is not None else None

    async def put(self, entry: Entry) -> None:
        self.session.add(
            ValueRecord(namespace=self.namespace, key=entry.key, value=entry.value)
        )
        # Flush now so a duplicate key fails inside the transaction.
        await self.session.flush()


class SqlValueStore(DurableStore):
    """Durable tier backed by SQLAlchemy asyncio."""

    def __init__(self, session_factory: async_sessionmaker, namespace: str):
        if not namespace:
            raise ValueError("namespace is required (cannot be empty)")
        self.session_factory = session_factory
        self.namespace = namespace

    async def get(self, key: str) -> Optional[Entry]:
        try:
            async with self.session_factory() as session:
                record = await session.get(ValueRecord, (self.namespace, key))
        except _BACKEND_ERRORS as e:
            raise BackendUnavailableException(
                CacheTier.DURABLE, "get", key=key, original_error=e
            ) from e

        return _to_entry(record) if record is not None else None

    async def get_multi(self, keys: Sequence[str]) -> Dict[str, Entry]:
        keys = list(keys)
        if not keys:
            return {}

        stmt = select(ValueRecord).where(
            ValueRecord.namespace == self.namespace,
            ValueRecord.key.in_(keys),
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
        except _BACKEND_ERRORS as e:
            raise BackendUnavailableException(
                CacheTier.DURABLE, "get_multi", original_error=e
            ) from e

        logger.debug(
            "Durable store multi-get",
            namespace=self.namespace,
            requested=len(keys),
            found=len(records),
        )
        return {record.key: _to_entry(record) for record in records}

    async def run_in_transaction(
        self, fn: Callable[[ValueTransaction], Awaitable[T]]
    ) -> T:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await fn(SqlValueTransaction(session, self.namespace))
        except IntegrityError as e:
            logger.info(
                "Durable store transaction lost a concurrent write",
                namespace=self.namespace,
            )
            raise TransactionConflictException(original_error=e) from e
        except _BACKEND_ERRORS as e:
            raise BackendUnavailableException(
                CacheTier.DURABLE, "transaction", original_error=e
            ) from e

    async def delete(self, key: str) -> bool:
        stmt = delete(ValueRecord).where(
            ValueRecord.namespace == self.namespace,
            ValueRecord.key == key,
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
        except _BACKEND_ERRORS as e:
            raise BackendUnavailableException(
                CacheTier.DURABLE, "delete", key=key, original_error=e
            ) from e

        return result.rowcount > 0

    async def list_all(self) -> List[Entry]:
        stmt = (
            select(ValueRecord)
            .where(ValueRecord.namespace == self.namespace)
            .order_by(ValueRecord.key)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
        except _BACKEND_ERRORS as e:
            raise BackendUnavailableException(
                CacheTier.DURABLE, "list_all", original_error=e
            ) from e

        return [_to_entry(record) for record in records]
