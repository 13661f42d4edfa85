"""
Admin endpoints for stored values.

List, create (write-once) and delete values. Every route requires
administrator credentials.
"""

from typing import Dict

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...domain.values.exceptions import (
    ValueAlreadyExistsException,
    ValueStoreException,
)
from ...monitoring.value_metrics import record_admin_operation
from ...services.values.value_resolver import ValueResolver
from ..dependencies import get_value_resolver, require_admin

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


class ValueCreate(BaseModel):
    """Schema for committing a new value."""

    key: str = Field(..., description="Value name")
    value: str = Field(..., description="Value contents")


class ValueResponse(BaseModel):
    key: str
    value: str


class ValueListResponse(BaseModel):
    values: Dict[str, str]
    count: int


class ValueDeleteResponse(BaseModel):
    key: str
    deleted: bool


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": error, "message": message}
    )


def _internal_error(e: ValueStoreException) -> JSONResponse:
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        e.error_code or "INTERNAL_ERROR",
        "Internal error",
    )


@router.get("/admin", response_model=ValueListResponse)
async def list_values(resolver: ValueResolver = Depends(get_value_resolver)):
    """List every committed value."""
    try:
        entries = await resolver.list_all()
    except ValueStoreException as e:
        record_admin_operation("list", "error")
        logger.error("Failed to list values", error=str(e), details=e.details)
        return _internal_error(e)

    record_admin_operation("list", "ok")
    values = {entry.key: entry.value for entry in entries}
    return ValueListResponse(values=values, count=len(values))


@router.post(
    "/admin/values",
    response_model=ValueResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_value(
    payload: ValueCreate, resolver: ValueResolver = Depends(get_value_resolver)
):
    """Commit a value for a key that has never been set."""
    try:
        entry = await resolver.set(payload.key, payload.value)
    except ValueError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, "INVALID_KEY", str(e))
    except ValueAlreadyExistsException as e:
        return _error_response(status.HTTP_409_CONFLICT, e.error_code, e.message)
    except ValueStoreException as e:
        logger.error(
            "Failed to commit value", key=payload.key, error=str(e), details=e.details
        )
        return _internal_error(e)

    return ValueResponse(key=entry.key, value=entry.value)


@router.delete("/admin/values/{key:path}", response_model=ValueDeleteResponse)
async def delete_value(key: str, resolver: ValueResolver = Depends(get_value_resolver)):
    """Delete a value from every tier. Deleting an absent key succeeds."""
    try:
        deleted = await resolver.delete(key)
    except ValueError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, "INVALID_KEY", str(e))
    except ValueStoreException as e:
        logger.error("Failed to delete value", key=key, error=str(e), details=e.details)
        return _internal_error(e)

    return ValueDeleteResponse(key=key, deleted=deleted)
