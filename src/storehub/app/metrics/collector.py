"""Prometheus metrics definitions."""

from prometheus_client import Counter, Histogram

# API calls and backend writes (5ms ~ 60s), log scale
_BUCKETS_MEDIUM = (
    0.005, 0.01, 0.02, 0.04, 0.09,
    0.18, 0.36, 0.73, 1.5, 3,
    6.2, 12.7, 26, 53,
)

HTTP_REQUESTS_TOTAL = Counter(
    "storehub_http_requests_total",
    "HTTP requests by method, endpoint and status",
    ["method", "endpoint", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "storehub_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=_BUCKETS_MEDIUM,
)

HUB_OPERATIONS_TOTAL = Counter(
    "storehub_hub_operations_total",
    "Store and list operations by outcome (ok or error code)",
    ["operation", "outcome"],
)
