"""HTTP request metrics.

The ``endpoint`` label is the matched route template
(``/v1/progress/{course_id}``), not the concrete URL, so one series covers
every course.  Unmatched paths fall back to the raw path.  Scrapes of
``/metrics`` are not counted.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from inspira.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

_UNINSTRUMENTED = frozenset({"/metrics"})


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _UNINSTRUMENTED:
            return await call_next(request)

        status_code = "500"
        started = time.perf_counter()
        with ACTIVE_REQUESTS.track_inprogress():
            try:
                response = await call_next(request)
                status_code = str(response.status_code)
                return response
            finally:
                endpoint = _route_template(request)
                REQUEST_DURATION.labels(request.method, endpoint).observe(
                    time.perf_counter() - started
                )
                REQUEST_COUNT.labels(request.method, endpoint, status_code).inc()
