"""JSON logging configuration with request tracing and rate limiting."""

import logging
import sys
import time
from collections import deque
from collections.abc import Callable, Iterable
from contextvars import ContextVar
from typing import Any
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

from storehub.app.config import LoggingConfig
from storehub.core.logging_schema import LogEvent

# Context variable for request tracing (set by middleware)
trace_id_ctx: ContextVar[str | None] = ContextVar("trace_id", default=None)

THROTTLED_EVENTS = frozenset({
    LogEvent.AUTH_REJECTED,
    LogEvent.PROOF_REJECTED,
    LogEvent.REQUEST_REJECTED,
})


def get_trace_id() -> str | None:
    """Get current trace_id from context."""
    return trace_id_ctx.get()


def set_trace_id(trace_id: str | None = None) -> str:
    """Set trace_id in context, generating one if not provided.

    Args:
        trace_id: Optional trace ID to set. If None, generates a new UUID.

    Returns:
        The trace ID that was set.
    """
    tid = trace_id or str(uuid4())
    trace_id_ctx.set(tid)
    return tid


def clear_trace_context() -> None:
    """Clear trace context (call at end of request)."""
    trace_id_ctx.set(None)


class RateLimitFilter(logging.Filter):
    """Throttle rejection logs that clients can trigger at request rate.

    Records carrying one of ``events`` are counted per (event, subject), where
    the subject is the record's ``namespace`` or, failing that, its ``path``.
    Each pair may log ``rate_per_minute`` times in a sliding minute. The first
    record over the limit is kept and tagged ``rate_limited``; the rest are
    dropped, and the next record let through reports them as ``suppressed``.

    ERROR records and records without a throttled event always pass.
    """

    MAX_TRACKED = 10_000

    def __init__(
        self,
        rate_per_minute: int = 100,
        events: Iterable[str] = THROTTLED_EVENTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.rate_per_minute = rate_per_minute
        self.events = frozenset(events)
        self._clock = clock
        self._windows: dict[tuple[str, str | None], deque[float]] = {}
        self._dropped: dict[tuple[str, str | None], int] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        event = getattr(record, "event", None)
        if record.levelno >= logging.ERROR or event not in self.events:
            return True

        subject = getattr(record, "namespace", None) or getattr(record, "path", None)
        key = (str(event), subject)
        now = self._clock()

        if key not in self._windows and len(self._windows) >= self.MAX_TRACKED:
            self._evict_idle(now)
        window = self._windows.setdefault(key, deque())
        while window and now - window[0] >= 60:
            window.popleft()

        if len(window) < self.rate_per_minute:
            window.append(now)
            if dropped := self._dropped.pop(key, 0):
                record.suppressed = dropped
            return True

        if key not in self._dropped:
            self._dropped[key] = 0
            record.rate_limited = True
            return True

        self._dropped[key] += 1
        return False

    def _evict_idle(self, now: float) -> None:
        idle = [k for k, w in self._windows.items() if not w or now - w[-1] >= 60]
        for key in idle:
            del self._windows[key]
            self._dropped.pop(key, None)


class StoreHubJsonFormatter(JsonFormatter):
    """One JSON object per record.

    Output keys: ``timestamp`` (UTC ISO 8601), ``level``, ``logger``,
    ``message``, ``schema_version``, ``service``, ``trace_id`` when a request
    is in flight, ``exception`` when one is attached, plus any ``extra=``
    fields such as ``event`` and ``component``.
    """

    def __init__(self, schema_version: str = "1.0", service: str = "storehub") -> None:
        super().__init__(
            "%(message)s %(levelname)s %(name)s",
            rename_fields={
                "levelname": "level",
                "name": "logger",
                "exc_info": "exception",
            },
            static_fields={"schema_version": schema_version, "service": service},
            timestamp=True,
        )

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if trace_id := get_trace_id():
            log_record.setdefault("trace_id", trace_id)
        # uvicorn duplicates the message with ANSI codes
        log_record.pop("color_message", None)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the application."""
    config = config or LoggingConfig()
    level = getattr(logging, config.level)

    formatter: logging.Formatter
    if config.json_format:
        formatter = StoreHubJsonFormatter(
            schema_version=config.schema_version,
            service=config.service_name,
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RateLimitFilter(config.rate_limit_per_minute))

    # Clear existing handlers to avoid duplicate logs
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in ("uvicorn", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = False
        uv_logger.addHandler(handler)

    # LoggingMiddleware writes the access log
    logging.getLogger("uvicorn.access").disabled = True

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("aiobotocore").setLevel(logging.WARNING)
