"""
Monitoring Module

Prometheus counters for value resolution.
"""

from .value_metrics import (
    ADMIN_OPERATIONS,
    TIER_BACKFILLS,
    TIER_LOOKUPS,
    record_admin_operation,
    record_backfill,
    record_lookup,
)

__all__ = [
    "ADMIN_OPERATIONS",
    "TIER_BACKFILLS",
    "TIER_LOOKUPS",
    "record_admin_operation",
    "record_backfill",
    "record_lookup",
]
