"""
Correlation ID Middleware

Generates or propagates a correlation ID per request, binds it to the
structlog context and echoes it back in the response headers.
"""

import uuid
from typing import Awaitable, Callable, Optional

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse
from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware for managing correlation IDs in HTTP requests."""

    def __init__(self, app: ASGIApp, header_name: str = "x-correlation-id"):
        super().__init__(app)
        self.header_name = header_name.lower()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[StarletteResponse]],
    ) -> StarletteResponse:
        correlation_id = self._extract_or_generate(request)

        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
        try:
            logger.debug("Request started", method=request.method, path=request.url.path)
            response = await call_next(request)
            response.headers[self.header_name] = correlation_id
            logger.debug("Request completed", status_code=response.status_code)
            return response
        finally:
            structlog.contextvars.unbind_contextvars("correlation_id")

    def _extract_or_generate(self, request: Request) -> str:
        correlation_id = request.headers.get(self.header_name)
        if correlation_id and self._is_valid(correlation_id):
            return correlation_id
        return str(uuid.uuid4())

    @staticmethod
    def _is_valid(correlation_id: Optional[str]) -> bool:
        """Only UUID-formatted IDs are propagated."""
        try:
            uuid.UUID(correlation_id)
        except (TypeError, ValueError):
            return False
        return True
