"""Table-driven RBAC tests.

Each row describes: endpoint, method, role, expected HTTP status.
Tokens are minted for the sample accounts: ``student`` is the enrolled
learner user-2, ``admin`` is user-1.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import ADMIN_ID, STUDENT_ID, auth, mint_token

_RBAC_CASES = [
    # (endpoint, method, role, expected_status)
    # public catalog
    ("/v1/courses", "GET", None, 200),
    ("/v1/courses/course-1", "GET", None, 200),
    ("/v1/courses/course-1/checkout", "GET", None, 200),
    # any authenticated user
    ("/v1/auth/me", "GET", "student", 200),
    ("/v1/auth/me", "GET", "admin", 200),
    ("/v1/auth/me", "GET", None, 401),
    ("/v1/courses/mine", "GET", "student", 200),
    ("/v1/courses/mine", "GET", None, 401),
    ("/v1/progress/course-1", "GET", "student", 200),
    ("/v1/progress/course-1", "GET", None, 401),
    ("/v1/notes/folders", "GET", "student", 200),
    ("/v1/notes/folders", "GET", None, 401),
    # admin only
    ("/v1/admin/students", "GET", "admin", 200),
    ("/v1/admin/students", "GET", "student", 403),
    ("/v1/admin/students", "GET", None, 401),
    ("/v1/admin/coupons", "GET", "admin", 200),
    ("/v1/admin/coupons", "GET", "student", 403),
    ("/v1/admin/coupons", "GET", None, 401),
    ("/v1/admin/access-codes", "GET", "admin", 200),
    ("/v1/admin/access-codes", "GET", "student", 403),
    ("/v1/admin/access-codes", "POST", "student", 403),
    ("/v1/admin/courses/course-1", "GET", "admin", 200),
    ("/v1/admin/courses/course-1", "GET", "student", 403),
    ("/v1/admin/courses", "POST", "student", 403),
    ("/v1/admin/courses", "POST", None, 401),
]


def _case_id(case: tuple) -> str:
    endpoint, method, role, expected = case
    role_label = role or "anon"
    return f"{method} {endpoint} [{role_label}] -> {expected}"


def _token(role: str | None) -> str | None:
    if role == "admin":
        return mint_token(username=ADMIN_ID, roles=["admin"])
    if role == "student":
        return mint_token(username=STUDENT_ID, roles=["student"])
    return None


@pytest.mark.parametrize(
    "endpoint,method,role,expected",
    _RBAC_CASES,
    ids=[_case_id(c) for c in _RBAC_CASES],
)
def test_rbac(
    client: TestClient,
    endpoint: str,
    method: str,
    role: str | None,
    expected: int,
) -> None:
    token = _token(role)
    headers = auth(token) if token else {}

    if method == "GET":
        resp = client.get(endpoint, headers=headers)
    elif method == "POST":
        resp = client.post(endpoint, json={"title": "RBAC"}, headers=headers)
    else:
        pytest.fail(f"Unsupported method: {method}")

    assert resp.status_code == expected, (
        f"{method} {endpoint} role={role}: expected {expected}, got {resp.status_code}"
    )


def test_expired_or_garbage_token_is_401(client: TestClient) -> None:
    resp = client.get("/v1/auth/me", headers=auth("not-a-jwt"))
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
