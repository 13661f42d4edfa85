"""
Main pytest configuration for value store tests.

Environment variables are set before any package module is imported so that
get_settings() resolves against the test configuration.
"""

import os

import pytest

# Set test environment variables before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./value_store_test.db"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["ADMIN_API_TOKENS"] = "admin-token-1,admin-token-2"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "false"

from value_store.infrastructure.local_cache import ProcessLocalCache
from value_store.services.values.value_resolver import ValueResolver

from tests.fakes import InMemoryDistributedCache, InMemoryDurableStore


@pytest.fixture
def durable_store():
    """In-memory durable tier."""
    return InMemoryDurableStore()


@pytest.fixture
def distributed_cache():
    """In-memory distributed tier."""
    return InMemoryDistributedCache()


@pytest.fixture
def local_cache():
    """Fresh process-local tier."""
    return ProcessLocalCache()


@pytest.fixture
def resolver(durable_store, distributed_cache, local_cache):
    """Resolver wired to in-memory tiers."""
    return ValueResolver(
        durable_store=durable_store,
        distributed_cache=distributed_cache,
        local_cache=local_cache,
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line(
        "markers", "integration: Tests that touch a real database file"
    )
    config.addinivalue_line("markers", "slow: Slow tests")
