"""Password hashing and credential checks.

Hashes are argon2id strings with salt and cost parameters embedded, so a
change of cost settings only affects new hashes; older ones are upgraded
on the next successful login.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from inspira.models.user import User
from inspira.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not (plain_password and password_hash):
        return False
    try:
        return _hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    """Return the active user owning these credentials, else None."""
    user = await repo.get_by_email(email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None

    if _hasher.check_needs_rehash(user.password_hash):
        user = replace(user, password_hash=_hasher.hash(password))
        await repo.save(user)
        logger.info("Password hash upgraded  user=%s", user.id)
    return user
