from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth


def test_request_id_generated(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    uuid.UUID(resp.headers["x-request-id"])


def test_request_id_echoed(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "checkout-trace-42"})
    assert resp.headers["x-request-id"] == "checkout-trace-42"


def test_request_id_on_error_responses(client: TestClient) -> None:
    assert client.get("/v1/progress/course-1").headers.get("x-request-id")
    assert client.get("/v1/courses/nope").headers.get("x-request-id")


def test_summary_line_carries_request_fields(
    client: TestClient, token: str, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="inspira.middleware.request_context"):
        client.post(
            "/v1/progress/course-1/lessons/les-1-1-1/toggle",
            headers={**auth(token), "X-Request-ID": "toggle-7"},
        )
    [line] = [
        r for r in caplog.records if r.name == "inspira.middleware.request_context"
    ]
    assert line.request_id == "toggle-7"  # type: ignore[attr-defined]
    assert line.status_code == 200  # type: ignore[attr-defined]
    assert line.path == "/v1/progress/course-1/lessons/les-1-1-1/toggle"  # type: ignore[attr-defined]
