"""Signed access tokens for the API.

Tokens are ES256 JWTs carrying the user id (``sub``) and roles.  The key
pair is generated per process, so restarting the API logs everyone out;
a deployment with several replicas needs a shared key instead.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

ALGORITHM = "ES256"
ISSUER = "inspira"
AUDIENCE = "inspira-api"
ACCESS_TOKEN_TTL = timedelta(hours=2)
DEFAULT_ROLES = ("student",)

_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()


def create_access_token(
    *,
    sub: str,
    roles: Iterable[str] | None = None,
    ttl: timedelta = ACCESS_TOKEN_TTL,
) -> str:
    issued_at = datetime.now(UTC)
    claims: dict[str, Any] = {
        "iss": ISSUER,
        "aud": AUDIENCE,
        "sub": sub,
        "roles": sorted(roles) if roles else list(DEFAULT_ROLES),
        "iat": issued_at,
        "exp": issued_at + ttl,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Return the verified claims.

    Only ES256 is accepted.  Raises ``jwt.ExpiredSignatureError`` for an
    expired token and ``jwt.InvalidTokenError`` for anything else wrong.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        audience=AUDIENCE,
        issuer=ISSUER,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
