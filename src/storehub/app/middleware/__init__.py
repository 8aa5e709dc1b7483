"""HTTP middleware."""

from storehub.app.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
