"""
Domain exceptions.

Raised for invalid input and for requests addressing missing or duplicate
entities.
"""

from typing import Optional, Dict, Any

from .base import ApplicationServiceError, ErrorKind


class ValidationError(ApplicationServiceError):
    """
    A required field is blank or an argument fails basic shape constraints.

    Example:
        >>> raise ValidationError(field="name", reason="must not be blank")
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        field: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            field: Offending field or argument
            reason: Why it was rejected
            details: Additional details
        """
        message = f"Invalid value for '{field}': {reason}"
        super().__init__(
            message=message,
            details={"field": field, "reason": reason, **(details or {})},
            error_code="VALIDATION_ERROR"
        )


class NotFoundError(ApplicationServiceError):
    """
    The addressed entity does not exist.

    Example:
        >>> raise NotFoundError("Application", "app-123")
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None
    ):
        message = f"{entity_type} '{entity_id}' not found"
        super().__init__(
            message=message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                **(details or {})
            },
            error_code="NOT_FOUND"
        )


class ConflictError(ApplicationServiceError):
    """
    An entity with the same id already exists.

    Example:
        >>> raise ConflictError("Application", "app-123")
    """

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None
    ):
        message = f"{entity_type} '{entity_id}' already exists"
        super().__init__(
            message=message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                **(details or {})
            },
            error_code="ALREADY_EXISTS"
        )
