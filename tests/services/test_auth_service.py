from __future__ import annotations

import asyncio
from dataclasses import replace

from argon2 import PasswordHasher

from inspira.models.user import User
from inspira.repos.user_repo import InMemoryUserRepo
from inspira.services.auth_service import (
    authenticate_user,
    hash_password,
    verify_password,
)


def test_hash_and_verify() -> None:
    h = hash_password("aluno123")
    assert h != "aluno123"
    assert verify_password("aluno123", h)
    assert not verify_password("wrong", h)


def test_verify_rejects_garbage_hash() -> None:
    assert not verify_password("x", "not-a-hash")


def test_authenticate_user_rehashes_when_needed() -> None:
    # Create a user with a deliberately "weak/old" Argon2 configuration.
    old_ph = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)
    password = "pw123"
    old_hash = old_ph.hash(password)

    repo = InMemoryUserRepo()
    asyncio.run(repo.add(User.new(email="tee@example.com", password_hash=old_hash)))

    authed = asyncio.run(authenticate_user(repo, "tee@example.com", password))
    assert authed is not None

    stored = asyncio.run(repo.get_by_email("tee@example.com"))
    assert stored is not None
    assert stored.password_hash != old_hash


def test_inactive_user_cannot_authenticate() -> None:
    repo = InMemoryUserRepo()
    user = User.new(email="gone@example.com", password_hash=hash_password("pw1234"))
    asyncio.run(repo.add(user))
    asyncio.run(repo.save(replace(user, is_active=False)))
    assert asyncio.run(authenticate_user(repo, "gone@example.com", "pw1234")) is None
