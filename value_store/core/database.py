"""
Database connection management for the durable tier.

- Connection pooling for PostgreSQL (asyncpg), plain pool for aiosqlite
- Engine creation retry with exponential backoff
- Table creation on startup
- Pool metrics for Prometheus
"""

import time
from typing import Any, Dict, Optional

import structlog
from prometheus_client import Counter, Histogram
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models import Base
from .config import Settings, get_settings

logger = structlog.get_logger(__name__)

DB_CONNECTION_DURATION = Histogram(
    "value_store_db_connection_duration_seconds",
    "Time spent establishing the database engine",
)
DB_FAILED_CONNECTIONS = Counter(
    "value_store_db_failed_connections_total",
    "Total number of failed database connection attempts",
)


class DatabaseManager:
    """
    Owns the async engine and session factory.

    Call initialize() once at startup; the session factory is then handed to
    SqlValueStore.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    def _engine_kwargs(self) -> Dict[str, Any]:
        if self.settings.is_sqlite:
            return {"echo": self.settings.DEBUG}
        return {
            "pool_size": self.settings.DATABASE_POOL_SIZE,
            "max_overflow": self.settings.DATABASE_MAX_OVERFLOW,
            "pool_timeout": self.settings.DATABASE_POOL_TIMEOUT,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
            "echo": self.settings.DEBUG,
            "connect_args": {
                "command_timeout": 60,
                "server_settings": {
                    "application_name": self.settings.SERVICE_NAME,
                    "lock_timeout": "10000",
                },
            },
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((OperationalError, ConnectionError, OSError)),
        before_sleep=lambda retry_state: logger.warning(
            "Database connection retry",
            attempt=retry_state.attempt_number,
            wait_time=retry_state.next_action.sleep,
        ),
        reraise=True,
    )
    async def _connect_with_retry(self) -> AsyncEngine:
        """Create the engine and create tables, retrying transient failures."""
        start_time = time.time()
        engine = create_async_engine(self.settings.DATABASE_URL, **self._engine_kwargs())
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(Base.metadata.create_all)
        except Exception:
            DB_FAILED_CONNECTIONS.inc()
            await engine.dispose()
            raise

        duration = time.time() - start_time
        DB_CONNECTION_DURATION.observe(duration)
        logger.info("Database engine created", duration_seconds=round(duration, 3))
        return engine

    async def initialize(self) -> None:
        """Initialize engine, tables and session factory."""
        if self.engine is not None:
            return

        try:
            self.engine = await self._connect_with_retry()
        except Exception as e:
            logger.error(
                "Database initialization failed", error=str(e), exc_info=True
            )
            raise

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database initialized")

    async def health_check(self) -> Dict[str, Any]:
        """Probe the database with SELECT 1."""
        if not self.engine:
            return {"status": "unhealthy", "error": "not initialized"}

        start_time = time.time()
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                if result.scalar() != 1:
                    raise RuntimeError("Database probe returned unexpected result")
        except Exception as e:
            logger.warning("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

        return {
            "status": "healthy",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    async def close(self) -> None:
        """Dispose of the engine and its pool."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("Database connections closed")
