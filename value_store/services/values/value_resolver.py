"""
Value Resolver Service

Resolves named string values through three tiers, fastest first:

    process-local cache -> distributed cache -> durable store

Reads never fail: backend problems are logged and treated as a miss, and an
unresolvable key reads as "". A successful read from a slower tier backfills
every faster tier that missed.

Writes are write-once: set() refuses a key that any tier already knows, and
the durable store's transaction is the authoritative check.
"""

from typing import Dict, Iterable, List, Optional

import structlog
from opentelemetry import trace

from ...domain.values.entities import Entry
from ...domain.values.exceptions import (
    BackendUnavailableException,
    TransactionConflictException,
    ValueAlreadyExistsException,
    ValueStoreException,
)
from ...domain.values.repository_interfaces import (
    DistributedCache,
    DurableStore,
    LocalCache,
    ValueTransaction,
)
from ...domain.values.value_objects import CacheTier
from ...infrastructure.local_cache import ProcessLocalCache
from ...monitoring.value_metrics import (
    record_admin_operation,
    record_backfill,
    record_lookup,
)

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class ValueResolver:
    """
    Tiered value lookup with write-once administration.

    The local cache belongs to this resolver instance. delete() evicts it
    here, but other processes keep serving a deleted key from their own local
    cache until they restart.
    """

    def __init__(
        self,
        durable_store: DurableStore,
        distributed_cache: DistributedCache,
        local_cache: Optional[LocalCache] = None,
    ):
        self.durable_store = durable_store
        self.distributed_cache = distributed_cache
        self.local_cache = local_cache if local_cache is not None else ProcessLocalCache()

    # Read path

    async def get(self, key: str) -> str:
        """
        Return the value for key, or "" if no tier can resolve it.

        Never raises.
        """
        with tracer.start_as_current_span("value_resolver.get") as span:
            span.set_attribute("value.key", key or "")
            if not key:
                return ""

            value = self.local_cache.get(key)
            if value is not None:
                record_lookup(CacheTier.LOCAL.value, "hit")
                span.set_attribute("value.tier", CacheTier.LOCAL.value)
                return value
            record_lookup(CacheTier.LOCAL.value, "miss")

            cached = await self.distributed_cache.get(key)
            record_lookup(CacheTier.DISTRIBUTED.value, cached.status.value)
            if cached.is_hit:
                self.local_cache.put(key, cached.value)
                record_backfill(CacheTier.LOCAL.value)
                span.set_attribute("value.tier", CacheTier.DISTRIBUTED.value)
                return cached.value
            if cached.is_unavailable:
                logger.warning(
                    "Distributed cache unavailable, falling back to durable store",
                    key=key,
                    error=cached.error,
                )

            try:
                entry = await self.durable_store.get(key)
            except Exception as e:
                record_lookup(CacheTier.DURABLE.value, "unavailable")
                logger.error(
                    "Durable store lookup failed", key=key, error=str(e), exc_info=True
                )
                span.set_attribute("value.tier", "none")
                return ""

            if entry is None:
                record_lookup(CacheTier.DURABLE.value, "miss")
                span.set_attribute("value.tier", "none")
                return ""
            record_lookup(CacheTier.DURABLE.value, "hit")

            self.local_cache.put(key, entry.value)
            record_backfill(CacheTier.LOCAL.value)
            stored = await self.distributed_cache.set(key, entry.value)
            if stored.is_unavailable:
                logger.warning(
                    "Failed to backfill distributed cache", key=key, error=stored.error
                )
            else:
                record_backfill(CacheTier.DISTRIBUTED.value)

            span.set_attribute("value.tier", CacheTier.DURABLE.value)
            return entry.value

    async def get_multi(self, keys: Iterable[str]) -> Dict[str, str]:
        """
        Resolve several keys with at most one call per remote tier.

        The result has exactly one entry per distinct requested key;
        unresolved keys map to "". Never raises.
        """
        requested = list(dict.fromkeys(keys))
        values: Dict[str, str] = {key: "" for key in requested}

        with tracer.start_as_current_span("value_resolver.get_multi") as span:
            span.set_attribute("value.key_count", len(requested))

            pending: List[str] = []
            for key in requested:
                if not key:
                    continue
                value = self.local_cache.get(key)
                if value is None:
                    pending.append(key)
                else:
                    values[key] = value
            record_lookup(CacheTier.LOCAL.value, "hit", len(requested) - len(pending))
            record_lookup(CacheTier.LOCAL.value, "miss", len(pending))
            if not pending:
                return values

            cached = await self.distributed_cache.get_multi(pending)
            if cached.is_unavailable:
                record_lookup(CacheTier.DISTRIBUTED.value, "unavailable", len(pending))
                logger.warning(
                    "Distributed cache multi-get unavailable, falling back to durable store",
                    key_count=len(pending),
                    error=cached.error,
                )
            missing: List[str] = []
            for key in pending:
                value = cached.values.get(key)
                if value is None:
                    missing.append(key)
                    continue
                values[key] = value
                self.local_cache.put(key, value)
            if not cached.is_unavailable:
                record_lookup(
                    CacheTier.DISTRIBUTED.value, "hit", len(pending) - len(missing)
                )
                record_lookup(CacheTier.DISTRIBUTED.value, "miss", len(missing))
            record_backfill(CacheTier.LOCAL.value, len(pending) - len(missing))
            if not missing:
                return values

            try:
                entries = await self.durable_store.get_multi(missing)
            except Exception as e:
                record_lookup(CacheTier.DURABLE.value, "unavailable", len(missing))
                logger.error(
                    "Durable store multi-get failed",
                    key_count=len(missing),
                    error=str(e),
                    exc_info=True,
                )
                return values
            record_lookup(CacheTier.DURABLE.value, "hit", len(entries))
            record_lookup(CacheTier.DURABLE.value, "miss", len(missing) - len(entries))

            backfill: Dict[str, str] = {}
            for key in missing:
                entry = entries.get(key)
                if entry is None:
                    continue
                values[key] = entry.value
                self.local_cache.put(key, entry.value)
                backfill[key] = entry.value
            record_backfill(CacheTier.LOCAL.value, len(backfill))

            if backfill:
                stored = await self.distributed_cache.set_multi(backfill)
                if stored.is_unavailable:
                    logger.warning(
                        "Failed to backfill distributed cache",
                        key_count=len(backfill),
                        error=stored.error,
                    )
                else:
                    record_backfill(CacheTier.DISTRIBUTED.value, len(backfill))

            return values

    # Administrative path

    async def set(self, key: str, value: str) -> Entry:
        """
        Commit a value for a key that has never been set.

        Raises:
            ValueError: If key or value is malformed
            ValueAlreadyExistsException: If any tier already holds the key
            BackendUnavailableException: If the durable store fails
        """
        entry = Entry.create(key, value)

        with tracer.start_as_current_span("value_resolver.set") as span:
            span.set_attribute("value.key", key)
            try:
                await self._admit(entry)
            except ValueAlreadyExistsException as e:
                record_admin_operation("set", "already_exists")
                logger.info("Rejected set of existing key", key=key, tier=e.tier.value)
                span.set_attribute("value.conflict_tier", e.tier.value)
                raise
            except ValueStoreException:
                record_admin_operation("set", "error")
                raise

        record_admin_operation("set", "ok")
        logger.info("Value committed", key=key)
        return entry

    async def _admit(self, entry: Entry) -> None:
        key = entry.key

        # Local and distributed checks are advisory only.
        if self.local_cache.get(key) is not None:
            raise ValueAlreadyExistsException(key, CacheTier.LOCAL)

        cached = await self.distributed_cache.get(key)
        if cached.is_hit:
            raise ValueAlreadyExistsException(key, CacheTier.DISTRIBUTED)
        if cached.is_unavailable:
            logger.warning(
                "Distributed cache unavailable, skipping advisory existence check",
                key=key,
                error=cached.error,
            )

        async def insert_if_absent(txn: ValueTransaction) -> None:
            if await txn.get(key) is not None:
                raise ValueAlreadyExistsException(key, CacheTier.DURABLE)
            await txn.put(entry)

        try:
            await self.durable_store.run_in_transaction(insert_if_absent)
        except TransactionConflictException as e:
            raise ValueAlreadyExistsException(key, CacheTier.DURABLE) from e

    async def delete(self, key: str) -> bool:
        """
        Remove key from the durable store and the caches.

        Returns True if a durable record existed. Deleting an absent key
        succeeds. Only emptiness is checked so rows written under older key
        rules can still be removed.

        Raises:
            ValueError: If key is empty
            BackendUnavailableException: If the durable store or the
                distributed cache fails
        """
        if not key:
            raise ValueError("Key cannot be empty")

        with tracer.start_as_current_span("value_resolver.delete") as span:
            span.set_attribute("value.key", key)
            try:
                existed = await self.durable_store.delete(key)
            except ValueStoreException:
                record_admin_operation("delete", "error")
                raise

            # The durable row is gone, so drop the local copy even if the
            # distributed eviction below fails.
            self.local_cache.evict(key)

            evicted = await self.distributed_cache.delete(key)
            if evicted.is_unavailable:
                record_admin_operation("delete", "error")
                logger.error(
                    "Failed to evict deleted key from distributed cache",
                    key=key,
                    error=evicted.error,
                )
                raise BackendUnavailableException(
                    CacheTier.DISTRIBUTED, "delete", key=key
                )

            span.set_attribute("value.existed", existed)

        record_admin_operation("delete", "ok")
        logger.info("Value deleted", key=key, existed=existed)
        return existed

    async def list_all(self) -> List[Entry]:
        """All committed entries, ordered by key. Errors propagate."""
        with tracer.start_as_current_span("value_resolver.list_all"):
            return await self.durable_store.list_all()
