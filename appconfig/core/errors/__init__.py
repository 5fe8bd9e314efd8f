"""
Exception hierarchy of the application config service.
"""

from .base import (
    ApplicationServiceError,
    ErrorKind
)

from .domain_errors import (
    ValidationError,
    NotFoundError,
    ConflictError
)

from .infrastructure_errors import StoreError

__all__ = [
    # Base
    "ApplicationServiceError",
    "ErrorKind",

    # Domain
    "ValidationError",
    "NotFoundError",
    "ConflictError",

    # Infrastructure
    "StoreError",
]
