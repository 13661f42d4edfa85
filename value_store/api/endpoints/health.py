"""
Health check endpoints.

Liveness for load balancers and a readiness probe that checks the durable
store and the distributed cache.
"""

from datetime import datetime, timezone
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ...core.config import get_settings

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """Basic liveness check."""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness check.

    Probes the database with SELECT 1 and Redis with PING. Returns 503 if
    either is unhealthy.
    """
    checks: Dict[str, Any] = {}

    database_manager = getattr(request.app.state, "database_manager", None)
    if database_manager is None:
        checks["database"] = {"status": "unhealthy", "error": "not initialized"}
    else:
        checks["database"] = await database_manager.health_check()

    redis_factory = getattr(request.app.state, "redis_factory", None)
    if redis_factory is None:
        checks["redis"] = {"status": "unhealthy", "error": "not initialized"}
    else:
        checks["redis"] = await redis_factory.health_check()

    ready = all(check.get("status") == "healthy" for check in checks.values())
    body = {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
    if not ready:
        logger.warning("Readiness check failed", checks=checks)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body
