"""API middleware for the whiteboard service."""

from whiteboard.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
