from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth


def _sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_uses_route_template(client: TestClient, token: str) -> None:
    labels = {
        "method": "GET",
        "endpoint": "/v1/progress/{course_id}",
        "status_code": "200",
    }
    before = _sample("http_requests_total", labels)
    client.get("/v1/progress/course-1", headers=auth(token))
    assert _sample("http_requests_total", labels) - before == 1


def test_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/v1/courses"}
    before = _sample("http_request_duration_seconds_count", labels)
    client.get("/v1/courses")
    assert _sample("http_request_duration_seconds_count", labels) - before == 1


def test_metrics_endpoint_exposes_domain_counters(client: TestClient) -> None:
    client.post("/v1/coupons/validate", json={"code": "EXPIRED50", "course_id": "course-1"})
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert 'coupon_validations_total{outcome="expired"}' in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _sample("http_requests_total", labels)
    client.get("/metrics")
    assert _sample("http_requests_total", labels) == before
