"""
Request dependencies for the admin surface.

Authorization runs before any value is read: missing credentials produce 401,
credentials that do not belong to an administrator produce 403.
"""

import hmac
from abc import ABC, abstractmethod
from typing import Iterable, Optional

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..services.values.value_resolver import ValueResolver

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AdminAuthorizer(ABC):
    """Decides whether a bearer credential belongs to an administrator."""

    @abstractmethod
    def is_admin(self, credential: str) -> bool:
        pass


class TokenAdminAuthorizer(AdminAuthorizer):
    """Accepts a fixed set of admin API tokens."""

    def __init__(self, tokens: Iterable[str]):
        self._tokens = [token for token in tokens if token]

    def is_admin(self, credential: str) -> bool:
        # Compare against every token so timing does not reveal which matched.
        matched = False
        for token in self._tokens:
            if hmac.compare_digest(credential.encode(), token.encode()):
                matched = True
        return matched


def get_admin_authorizer(request: Request) -> AdminAuthorizer:
    authorizer = getattr(request.app.state, "admin_authorizer", None)
    if authorizer is None:
        raise RuntimeError("Admin authorizer not configured")
    return authorizer


def get_value_resolver(request: Request) -> ValueResolver:
    resolver = getattr(request.app.state, "value_resolver", None)
    if resolver is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Value resolver not initialized",
        )
    return resolver


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authorizer: AdminAuthorizer = Depends(get_admin_authorizer),
) -> str:
    """
    Require administrator credentials.

    Returns the accepted credential.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorizer.is_admin(credentials.credentials):
        logger.warning("Rejected non-admin credentials on admin route")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )

    return credentials.credentials
