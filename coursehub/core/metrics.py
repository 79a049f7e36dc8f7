"""Prometheus metrics for coursehub.

Every metric the service exports is defined here so there is one inventory
to read.  Modules import the metric they own and increment it at the point
of action.

HTTP metrics are populated by MetricsMiddleware for every route.  The
domain counters answer the questions an operator asks about the course
platform itself:

  course_access_decisions_total{result, basis}
      How often learners are let in or turned away, and why.  A spike in
      result="denied", basis="enrollment" after a bulk unenroll is expected;
      a spike without one is worth a look.

  session_completions_total{result}
      result="created" is real learner progress; result="duplicate" counts
      repeated mark-complete clicks absorbed by the idempotent insert.
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
# Domain metrics
# ---------------------------------------------------------------------------

ACCESS_DECISIONS = Counter(
    "course_access_decisions_total",
    "Course access decisions by result and basis",
    ["result", "basis"],  # result: allowed|denied, basis: staff|enrollment
)

SESSION_COMPLETIONS = Counter(
    "session_completions_total",
    "Mark-complete calls by outcome",
    ["result"],  # created|duplicate
)

STORE_FAILURES = Counter(
    "store_unavailable_total",
    "Requests that failed because the backing store was unreachable",
)
