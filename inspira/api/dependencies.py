from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from inspira.db import engine as db_engine
from inspira.models.principal import Principal
from inspira.repos.registry import Repos, in_memory_repos, pg_repos
from inspira.services import token_service
from inspira.services.errors import (
    ConcurrentUpdateError,
    ConflictError,
    CouponError,
    DomainError,
    InvalidInputError,
    InvalidOperationError,
    NotFoundError,
    PersistenceError,
)

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login")

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=_BEARER_CHALLENGE,
    )


def require_user(raw_token: Annotated[str, Depends(oauth2_scheme)]) -> Principal:
    """Resolve the bearer token into a Principal or answer 401.

    The token is trusted as issued; whether the account still exists is
    checked only where it matters (``/v1/auth/me``, the services).
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.info("Bearer token expired")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Bearer token rejected  reason=%s", e)
        raise _unauthorized("Invalid token") from None

    return Principal(user_id=claims["sub"], roles=frozenset(claims.get("roles", ())))


def require_role(role: str) -> Callable[[Principal], Principal]:
    """Build a dependency that answers 403 unless the caller holds ``role``."""

    def guard(principal: Annotated[Principal, Depends(require_user)]) -> Principal:
        if principal.has_role(role):
            return principal
        logger.warning("Forbidden  user=%s required_role=%s", principal.user_id, role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )

    return guard


require_admin = require_role("admin")


async def get_repos() -> AsyncGenerator[Repos, None]:
    """Yield the repositories for one request.

    In-memory singletons when no database is configured; otherwise
    Postgres repos sharing one session that commits when the endpoint
    returns and rolls back if it raises.
    """
    if db_engine.async_session_factory is None:
        yield in_memory_repos
        return

    async with db_engine.async_session_factory() as session:
        try:
            yield pg_repos(session)
            with db_engine.translate_db_errors("commit"):
                await session.commit()
        except Exception:
            await session.rollback()
            raise


def http_error(exc: DomainError) -> HTTPException:
    """Map a domain error to the HTTP status the API answers with."""
    if isinstance(exc, CouponError):
        # Unknown code -> 404, every other rejection -> 400 with its reason.
        code = (
            status.HTTP_404_NOT_FOUND
            if isinstance(exc, NotFoundError)
            else status.HTTP_400_BAD_REQUEST
        )
        return HTTPException(
            status_code=code, detail={"message": str(exc), "reason": exc.reason}
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (InvalidOperationError, InvalidInputError)):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc)
        )
    if isinstance(exc, (ConflictError, ConcurrentUpdateError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PersistenceError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable",
        )
    logger.error("Unmapped domain error %s: %s", type(exc).__name__, exc)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


RepoDep = Annotated[Repos, Depends(get_repos)]
UserDep = Annotated[Principal, Depends(require_user)]
AdminDep = Annotated[Principal, Depends(require_admin)]
