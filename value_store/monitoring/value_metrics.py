"""
Prometheus metrics for tier resolution and admin operations.
"""

from prometheus_client import Counter

TIER_LOOKUPS = Counter(
    "value_store_tier_lookups_total",
    "Lookups per tier by outcome",
    ["tier", "outcome"],
)
TIER_BACKFILLS = Counter(
    "value_store_tier_backfills_total",
    "Values written into a faster tier after a slower-tier hit",
    ["tier"],
)
ADMIN_OPERATIONS = Counter(
    "value_store_admin_operations_total",
    "Administrative operations by outcome",
    ["operation", "outcome"],
)


def record_lookup(tier: str, outcome: str, count: int = 1) -> None:
    if count:
        TIER_LOOKUPS.labels(tier=tier, outcome=outcome).inc(count)


def record_backfill(tier: str, count: int = 1) -> None:
    if count:
        TIER_BACKFILLS.labels(tier=tier).inc(count)


def record_admin_operation(operation: str, outcome: str) -> None:
    ADMIN_OPERATIONS.labels(operation=operation, outcome=outcome).inc()
