"""Logging field schema - v1.0

Standard fields (added to all logs):
- schema_version: Log schema version
- service: Service name (storehub)
- component: Component name (HUB, AUTH, PROOF, DRIVER, API)
- event: Event type (store_complete, auth_rejected, etc.)
- trace_id: Request trace ID (X-Trace-ID)
- duration_ms: Duration in milliseconds

High cardinality fields (OK in logs, NOT in metric labels):
- namespace: Writer address
- path: Object path
"""

from enum import StrEnum


class LogEvent(StrEnum):
    """Standard log event types.

    Use these event types in the 'event' extra field for consistent
    log filtering and analysis.
    """

    # Lifecycle events
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"
    DRIVER_STARTED = "driver_started"

    # API events
    REQUEST_COMPLETE = "request_complete"
    REQUEST_FAILED = "request_failed"
    REQUEST_SLOW = "request_slow"
    REQUEST_REJECTED = "request_rejected"

    # Hub events
    STORE_COMPLETE = "store_complete"
    LIST_COMPLETE = "list_complete"
    AUTH_REJECTED = "auth_rejected"
    PROOF_REJECTED = "proof_rejected"
    BACKEND_ERROR = "backend_error"

    # Driver events
    S3_CONNECTED = "s3_connected"
    S3_BUCKET_CREATED = "s3_bucket_created"
    S3_ERROR = "s3_error"

    # Configuration
    CONFIG_INVALID = "config_invalid"


class Component(StrEnum):
    """Component identifiers for log filtering."""

    HUB = "hub"  # HubServer orchestrator
    AUTH = "auth"  # Token verification
    PROOF = "proof"  # Proof checker
    DRIVER = "driver"  # Storage drivers
    API = "api"  # REST API
