"""API middleware for pptxdom."""

from pptxdom.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
