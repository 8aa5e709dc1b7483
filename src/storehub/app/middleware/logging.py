"""Request logging middleware.

Provides canonical log line per request with trace ID propagation.
"""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from storehub.app.metrics.collector import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL
from storehub.app.logging import clear_trace_context, set_trace_id
from storehub.core.logging_schema import Component, LogEvent

logger = logging.getLogger(__name__)

TRACE_ID_HEADER = "X-Trace-ID"

# Replace namespaces and object paths with placeholders (cardinality control)
_PATH_PATTERNS = [
    (re.compile(r"^/store/[^/]+/.*$"), "/store/:namespace/*"),
    (re.compile(r"^/list-files/[^/]+/?$"), "/list-files/:namespace"),
]

_KNOWN_ENDPOINTS = frozenset({
    "/store/:namespace/*",
    "/list-files/:namespace",
    "/hub_info/",
})

_SKIP_PATHS = ("/health", "/metrics")


def normalize_endpoint(path: str) -> str:
    """Normalize path and apply whitelist; unknown paths become "other"."""
    for pattern, replacement in _PATH_PATTERNS:
        path = pattern.sub(replacement, path)
    return path if path in _KNOWN_ENDPOINTS else "other"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging with trace ID propagation.

    Features:
    - Sets trace_id from X-Trace-ID header or generates new one
    - Logs canonical request log line (one per request)
    - Warns when a request exceeds slow_threshold_ms
    - Adds X-Trace-ID header to response

    Usage:
        app.add_middleware(LoggingMiddleware, slow_threshold_ms=1000.0)
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: float = 1000.0) -> None:
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        trace_id = set_trace_id(request.headers.get(TRACE_ID_HEADER))

        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.monotonic() - start) * 1000
            logger.error(
                "Request failed",
                extra={
                    "event": LogEvent.REQUEST_FAILED,
                    "component": Component.API,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "trace_id": trace_id,
                },
            )
            raise
        finally:
            clear_trace_context()

        duration_seconds = time.monotonic() - start
        duration_ms = duration_seconds * 1000

        if request.url.path not in _SKIP_PATHS:
            endpoint = normalize_endpoint(request.url.path)
            HTTP_REQUESTS_TOTAL.labels(
                method=request.method,
                endpoint=endpoint,
                status=str(response.status_code),
            ).inc()
            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration_seconds)

            logger.info(
                "Request completed",
                extra={
                    "event": LogEvent.REQUEST_COMPLETE,
                    "component": Component.API,
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "trace_id": trace_id,
                },
            )

            if duration_ms > self.slow_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    extra={
                        "event": LogEvent.REQUEST_SLOW,
                        "component": Component.API,
                        "method": request.method,
                        "path": request.url.path,
                        "status": response.status_code,
                        "duration_ms": duration_ms,
                        "threshold_ms": self.slow_threshold_ms,
                        "trace_id": trace_id,
                    },
                )

        response.headers[TRACE_ID_HEADER] = trace_id
        return response
