"""
Value Store - FastAPI Application

Serves the admin surface for stored values plus health and metrics
endpoints. The resolver is wired on startup:

    SqlValueStore (durable) + RedisValueCache (distributed)
        + ProcessLocalCache -> ValueResolver
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.dependencies import AdminAuthorizer, TokenAdminAuthorizer
from .api.endpoints.admin import router as admin_router
from .api.endpoints.health import router as health_router
from .constants import APP_NAME, APP_VERSION
from .core.config import Settings, get_settings
from .core.correlation import CorrelationIdMiddleware
from .core.database import DatabaseManager
from .core.logging import configure_logging
from .infrastructure.redis.connection_factory import RedisConnectionFactory
from .infrastructure.repositories import RedisValueCache, SqlValueStore
from .services.values.value_resolver import ValueResolver

logger = structlog.get_logger(__name__)


def _build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open backend connections and build the resolver."""
        configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
        logger.info(
            "Starting value store",
            version=settings.SERVICE_VERSION,
            environment=settings.ENVIRONMENT,
            namespace=settings.VALUE_NAMESPACE,
        )

        if app.state.value_resolver is None:
            database_manager = DatabaseManager(settings)
            redis_factory = RedisConnectionFactory(settings)
            try:
                await database_manager.initialize()
                await redis_factory.initialize()
            except Exception:
                logger.exception("Failed to initialize application")
                await redis_factory.close()
                await database_manager.close()
                raise

            app.state.database_manager = database_manager
            app.state.redis_factory = redis_factory
            app.state.value_resolver = ValueResolver(
                durable_store=SqlValueStore(
                    database_manager.session_factory, settings.VALUE_NAMESPACE
                ),
                distributed_cache=RedisValueCache(
                    redis_factory, key_prefix=settings.CACHE_KEY_PREFIX
                ),
            )

        logger.info("Value store started", admin_prefix=settings.ADMIN_PATH_PREFIX)

        yield

        logger.info("Shutting down value store")
        try:
            if app.state.redis_factory is not None:
                await app.state.redis_factory.close()
            if app.state.database_manager is not None:
                await app.state.database_manager.close()
            logger.info("Application shutdown completed")
        except Exception as e:
            logger.error("Error during application shutdown", error=str(e))

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    resolver: Optional[ValueResolver] = None,
    authorizer: Optional[AdminAuthorizer] = None,
) -> FastAPI:
    """
    Build the application.

    A resolver passed in is used as is and no backend connections are opened.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=APP_NAME,
        description="Tiered value store with write-once administration",
        version=APP_VERSION,
        lifespan=_build_lifespan(settings),
    )
    app.state.settings = settings
    app.state.value_resolver = resolver
    app.state.database_manager = None
    app.state.redis_factory = None
    app.state.admin_authorizer = authorizer or TokenAdminAuthorizer(
        settings.admin_tokens_list
    )

    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health_router)
    app.include_router(
        admin_router, prefix=settings.ADMIN_PATH_PREFIX, tags=["admin"]
    )

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


if __name__ == "__main__":
    uvicorn.run(
        "value_store.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
