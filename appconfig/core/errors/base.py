"""
Base exceptions for the application config service.

Every failure the service surfaces is an ``ApplicationServiceError`` carrying
an ``ErrorKind``, so callers can catch one type and still branch on the cause.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Discriminator attached to every service error."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE = "store"


class ApplicationServiceError(Exception):
    """
    Base exception for all application config service errors.

    Attributes:
        message: Error message
        details: Additional error details
        error_code: Error code for identification
        kind: Error kind used to discriminate the cause

    Example:
        >>> try:
        ...     await service.get_application("app-1")
        ... except ApplicationServiceError as e:
        ...     if e.kind is ErrorKind.NOT_FOUND:
        ...         ...
    """

    kind: ErrorKind = ErrorKind.STORE

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        """
        Args:
            message: Error message
            details: Additional details (optional)
            error_code: Error code (optional)
        """
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the exception to a dictionary.

        Useful for logging and API responses.
        """
        return {
            "error_code": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message
