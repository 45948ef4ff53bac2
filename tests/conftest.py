from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from inspira.main import app
from inspira.repos.registry import Repos, in_memory_repos, new_in_memory_repos
from inspira.repos.seed import seed_sample_data
from inspira.services import token_service
from inspira.services.cache import cache_service

# Sample accounts loaded by seed_sample_data.
ADMIN_ID = "user-1"
STUDENT_ID = "user-2"
CT_STUDENT_ID = "user-3"
OTHER_STUDENT_ID = "user-4"


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Reload the sample catalog into the shared in-memory repos."""
    in_memory_repos.courses._by_id.clear()  # type: ignore[attr-defined]
    in_memory_repos.enrollments._store.clear()  # type: ignore[attr-defined]
    in_memory_repos.coupons._by_id.clear()  # type: ignore[attr-defined]
    in_memory_repos.users._by_id.clear()  # type: ignore[attr-defined]
    in_memory_repos.users._by_email.clear()  # type: ignore[attr-defined]
    in_memory_repos.access_codes._by_id.clear()  # type: ignore[attr-defined]
    in_memory_repos.notes._by_id.clear()  # type: ignore[attr-defined]
    asyncio.run(seed_sample_data(in_memory_repos))


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def repos() -> Repos:
    """The same in-memory bundle the API serves, for direct assertions."""
    return in_memory_repos


@pytest.fixture
def fresh_repos() -> Repos:
    """An isolated, seeded bundle for service-level tests."""
    bundle = new_in_memory_repos()
    asyncio.run(seed_sample_data(bundle))
    return bundle


def mint_token(
    username: str = STUDENT_ID,
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token for the enrolled sample student (course-1)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username=ADMIN_ID, roles=["admin"])
