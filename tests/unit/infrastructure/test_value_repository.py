"""
Tests for the SQLAlchemy durable store on aiosqlite.
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from value_store.constants import MAX_KEY_LENGTH
from value_store.domain.values.entities import Entry
from value_store.domain.values.exceptions import (
    BackendUnavailableException,
    TransactionConflictException,
    ValueAlreadyExistsException,
)
from value_store.domain.values.value_objects import CacheTier
from value_store.infrastructure.repositories.value_repository import SqlValueStore
from value_store.models import Base, ValueRecord
from value_store.services.values.value_resolver import ValueResolver

from tests.fakes import InMemoryDistributedCache

pytestmark = pytest.mark.integration


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'values.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return SqlValueStore(session_factory, "Values")


async def insert(store, key, value):
    async def put(txn):
        await txn.put(Entry(key=key, value=value))

    await store.run_in_transaction(put)


class TestSqlValueStore:
    def test_namespace_required(self, session_factory):
        with pytest.raises(ValueError):
            SqlValueStore(session_factory, "")

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        await insert(store, "api_key", "s3cr3t")

        entry = await store.get("api_key")

        assert entry == Entry(key="api_key", value="s3cr3t")

    @pytest.mark.asyncio
    async def test_get_multi_partial(self, store):
        await insert(store, "a", "1")
        await insert(store, "c", "3")

        entries = await store.get_multi(["a", "b", "c"])

        assert set(entries) == {"a", "c"}
        assert entries["c"].value == "3"

    @pytest.mark.asyncio
    async def test_get_multi_empty(self, store):
        assert await store.get_multi([]) == {}

    @pytest.mark.asyncio
    async def test_transaction_read_sees_committed_record(self, store):
        await insert(store, "api_key", "s3cr3t")

        async def read(txn):
            return await txn.get("api_key")

        assert (await store.run_in_transaction(read)).value == "s3cr3t"

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_conflict(self, store):
        await insert(store, "api_key", "first")

        with pytest.raises(TransactionConflictException):
            await insert(store, "api_key", "second")

        assert (await store.get("api_key")).value == "first"

    @pytest.mark.asyncio
    async def test_domain_error_in_transaction_rolls_back(self, store):
        async def put_then_fail(txn):
            await txn.put(Entry(key="api_key", value="s3cr3t"))
            raise ValueAlreadyExistsException("api_key", CacheTier.DURABLE)

        with pytest.raises(ValueAlreadyExistsException):
            await store.run_in_transaction(put_then_fail)

        assert await store.get("api_key") is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await insert(store, "api_key", "s3cr3t")

        assert await store.delete("api_key") is True
        assert await store.delete("api_key") is False
        assert await store.get("api_key") is None

    @pytest.mark.asyncio
    async def test_list_all_ordered(self, store):
        await insert(store, "b", "2")
        await insert(store, "a", "1")

        entries = await store.list_all()

        assert [e.key for e in entries] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, store, session_factory):
        secrets = SqlValueStore(session_factory, "Secrets")
        await insert(store, "api_key", "value")
        await insert(secrets, "api_key", "secret")

        assert (await store.get("api_key")).value == "value"
        assert (await secrets.get("api_key")).value == "secret"
        assert [e.key for e in await secrets.list_all()] == ["api_key"]


class TestSqlValueStoreLegacyRows:
    """Rows written outside the admin path may not satisfy current key rules."""

    @pytest.fixture
    async def legacy_rows(self, session_factory):
        async with session_factory() as session:
            async with session.begin():
                session.add_all(
                    [
                        ValueRecord(namespace="Values", key="good", value="1"),
                        ValueRecord(namespace="Values", key="bad ", value="2"),
                        ValueRecord(
                            namespace="Values",
                            key="k" * (MAX_KEY_LENGTH + 1),
                            value="3",
                        ),
                    ]
                )

    @pytest.mark.asyncio
    async def test_get_multi_returns_every_row(self, store, legacy_rows):
        entries = await store.get_multi(["good", "bad "])

        assert entries["good"].value == "1"
        assert entries["bad "].value == "2"

    @pytest.mark.asyncio
    async def test_list_all_includes_legacy_keys(self, store, legacy_rows):
        entries = await store.list_all()

        assert {e.key: e.value for e in entries}["bad "] == "2"
        assert len(entries) == 3

    @pytest.mark.asyncio
    async def test_resolver_batch_not_poisoned(self, store, legacy_rows):
        resolver = ValueResolver(store, InMemoryDistributedCache())

        values = await resolver.get_multi(["good", "bad "])

        assert values == {"good": "1", "bad ": "2"}


class TestSqlWriteOnceRace:
    @pytest.mark.asyncio
    async def test_concurrent_sets_exactly_one_succeeds(self, store):
        resolver = ValueResolver(store, InMemoryDistributedCache())

        results = await asyncio.gather(
            *(resolver.set("api_key", f"value-{i}") for i in range(5)),
            return_exceptions=True,
        )

        winners = [r for r in results if isinstance(r, Entry)]
        losers = [r for r in results if not isinstance(r, Entry)]
        assert len(winners) == 1
        assert len(losers) == 4
        assert all(isinstance(e, ValueAlreadyExistsException) for e in losers)
        assert all(e.tier == CacheTier.DURABLE for e in losers)
        assert (await store.get("api_key")).value == winners[0].value


class TestSqlValueStoreFailures:
    @pytest.fixture
    async def broken_store(self, tmp_path):
        # No tables created, so every statement fails.
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        yield SqlValueStore(async_sessionmaker(bind=engine), "Values")
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_get_raises_backend_unavailable(self, broken_store):
        with pytest.raises(BackendUnavailableException) as exc_info:
            await broken_store.get("api_key")

        assert exc_info.value.tier == CacheTier.DURABLE
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_get_multi_raises_backend_unavailable(self, broken_store):
        with pytest.raises(BackendUnavailableException):
            await broken_store.get_multi(["a"])

    @pytest.mark.asyncio
    async def test_transaction_raises_backend_unavailable(self, broken_store):
        with pytest.raises(BackendUnavailableException):
            await insert(broken_store, "api_key", "s3cr3t")

    @pytest.mark.asyncio
    async def test_delete_raises_backend_unavailable(self, broken_store):
        with pytest.raises(BackendUnavailableException):
            await broken_store.delete("api_key")

    @pytest.mark.asyncio
    async def test_list_all_raises_backend_unavailable(self, broken_store):
        with pytest.raises(BackendUnavailableException):
            await broken_store.list_all()
