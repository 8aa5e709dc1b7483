"""Error handling module for storehub.

This module defines error codes, exception classes, and response models.

Error Response Format:
{
    "message": "Failed to validate authentication token"
}

Usage:
    from storehub.core.errors import BadPathError, ValidationError

    # Raise with default message
    raise ValidationError()

    # Raise with custom message
    raise BadPathError("Path must not contain '..' segments")
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes (logged, not sent to clients)."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_ENOUGH_PROOF = "NOT_ENOUGH_PROOF"
    BAD_PATH = "BAD_PATH"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ErrorResponse(BaseModel):
    """Error response body returned to clients."""

    message: str


class StoreHubError(Exception):
    """Base exception for storehub.

    All storehub specific exceptions should inherit from this class.
    This enables centralized exception handling in FastAPI.

    Attributes:
        code: The error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code to return
    """

    def __init__(self, code: ErrorCode, message: str, status_code: int) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model."""
        return ErrorResponse(message=self.message)


class InvalidRequestError(StoreHubError):
    """400 Bad Request - Malformed or oversized request body."""

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(ErrorCode.INVALID_REQUEST, message, 400)


class InvalidPageError(InvalidRequestError):
    """400 Bad Request - Listing cursor was not issued by this hub."""

    def __init__(self, message: str = "Invalid page cursor") -> None:
        super().__init__(message)


class ValidationError(StoreHubError):
    """401 Unauthorized - Authentication token rejected.

    The message is identical for every failure reason so that clients
    cannot probe which check failed.
    """

    def __init__(
        self, message: str = "Failed to validate authentication token"
    ) -> None:
        super().__init__(ErrorCode.UNAUTHORIZED, message, 401)


class NotEnoughProofError(StoreHubError):
    """402 Payment Required - Namespace lacks verified ownership proofs."""

    def __init__(self, message: str = "Not enough social proofs") -> None:
        super().__init__(ErrorCode.NOT_ENOUGH_PROOF, message, 402)


class BadPathError(StoreHubError):
    """403 Forbidden - Invalid namespace or object path."""

    def __init__(self, message: str = "Invalid path") -> None:
        super().__init__(ErrorCode.BAD_PATH, message, 403)


class PayloadTooLargeError(StoreHubError):
    """413 Payload Too Large - Upload exceeds the configured limit."""

    def __init__(self, message: str = "Payload too large") -> None:
        super().__init__(ErrorCode.PAYLOAD_TOO_LARGE, message, 413)


class ServerError(StoreHubError):
    """500 Internal Server Error - Unclassified failure, details stay server-side."""

    def __init__(self, message: str = "Server Error") -> None:
        super().__init__(ErrorCode.INTERNAL_ERROR, message, 500)


class ConfigurationError(StoreHubError):
    """500 Internal Server Error - Deployment is misconfigured."""

    def __init__(self, message: str = "Server misconfigured") -> None:
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message, 500)


class ProofServiceError(Exception):
    """Proof service returned an unusable response."""
