"""API middleware package."""

from src.studio.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
