"""Middleware modules"""

from appconfig.middleware.logging import StructuredLoggingMiddleware

__all__ = ["StructuredLoggingMiddleware"]
