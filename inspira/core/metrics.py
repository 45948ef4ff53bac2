"""Application metrics using the Prometheus client library.

Every metric the service exposes is declared here, in one inventory.
Other modules import the metric they own and increment it at the point
of action; /metrics renders the lot in exposition format.

Counters only go up (requests served, quizzes graded), gauges go up and
down (in-flight requests), histograms bucket observations so Prometheus
can compute percentiles.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Learning / catalog metrics
# ---------------------------------------------------------------------------

LESSON_TOGGLES = Counter(
    "lesson_toggles_total",
    "Manual lesson completion toggles",
    ["action"],  # "completed" or "uncompleted"
)

QUIZ_SUBMISSIONS = Counter(
    "quiz_submissions_total",
    "Graded quiz submissions by result",
    ["result"],  # "passed" or "failed"
)

QUIZ_SCORES = Histogram(
    "quiz_score_percent",
    "Distribution of quiz scores (0-100)",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

COURSE_COMPLETIONS = Counter(
    "course_completions_total",
    "Completion events fired when a learner reaches 100% progress",
)

COUPON_VALIDATIONS = Counter(
    "coupon_validations_total",
    "Coupon validation attempts by outcome",
    ["outcome"],  # valid|not_found|inactive|expired|wrong_scope
)

OPTIMISTIC_RETRIES = Counter(
    "enrollment_update_retries_total",
    "Completed-lesson writes retried after a version conflict",
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)
