from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from coursehub.db import engine as db
from coursehub.models.principal import Principal
from coursehub.models.user import Role
from coursehub.repos.stores import Stores, in_memory_stores, pg_stores
from coursehub.services import token_service

logger = logging.getLogger(__name__)

# Tokens are issued by the identity provider; tokenUrl only feeds the docs UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token", auto_error=False)

# Process-wide stores used when DATABASE_URL is not configured.
_memory_stores = in_memory_stores()


def memory_stores() -> Stores:
    return _memory_stores


def reset_memory_stores() -> Stores:
    """Replace the in-memory stores with empty ones (tests, demo reseed)."""
    global _memory_stores
    _memory_stores = in_memory_stores()
    return _memory_stores


async def get_stores() -> AsyncIterator[Stores]:
    """One unit of work per request.

    With a database, every repo shares one session that commits when the
    route returns and rolls back when it raises.
    """
    if db.async_session_factory is None:
        yield _memory_stores
        return
    async with db.session_scope() as session:
        yield pg_stores(session)


StoresDep = Annotated[Stores, Depends(get_stores)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _principal_from_token(raw_token: str) -> Principal:
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        principal = Principal(
            user_id=UUID(str(claims["sub"])),
            role=Role.parse(str(claims["role"])),
        )
    except ValueError:
        logger.warning(
            "Token with malformed identity rejected sub=%r role=%r",
            claims.get("sub"),
            claims.get("role"),
        )
        raise _unauthorized("Invalid token") from None

    logger.debug(
        "Token validated for user=%s role=%s", principal.user_id, principal.role
    )
    return principal


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.
    """
    return _principal_from_token(raw_token)


def optional_user(
    raw_token: Annotated[str | None, Depends(optional_oauth2_scheme)],
) -> Principal | None:
    """Like require_user, but anonymous callers get None.

    A token that is present but invalid is still a 401.
    """
    if raw_token is None:
        return None
    return _principal_from_token(raw_token)


def require_role(*roles: Role):
    """Dependency factory: demand one of the given roles.

    Usage: Depends(require_role(Role.ADMIN))
    Returns the Principal if the role matches, else 403.
    """
    allowed = set(roles)

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(allowed):
            logger.warning(
                "Access denied: user=%s role=%s required_any=%s",
                principal.user_id,
                principal.role,
                sorted(allowed),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


require_staff = require_role(Role.LEADER, Role.ADMIN)
require_admin = require_role(Role.ADMIN)

CurrentUser = Annotated[Principal, Depends(require_user)]
OptionalUser = Annotated[Principal | None, Depends(optional_user)]
StaffUser = Annotated[Principal, Depends(require_staff)]
AdminUser = Annotated[Principal, Depends(require_admin)]
