"""
Infrastructure exceptions.

Failures of the persistence collaborator, surfaced to the caller unchanged.
"""

from typing import Optional, Dict, Any

from .base import ApplicationServiceError, ErrorKind


class StoreError(ApplicationServiceError):
    """
    The entity store failed (I/O, unavailability, driver error).

    Example:
        >>> raise StoreError(
        ...     operation="insert",
        ...     entity_type="Application",
        ...     reason="database is locked"
        ... )
    """

    kind = ErrorKind.STORE

    def __init__(
        self,
        operation: str,
        entity_type: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            operation: Store operation (get, insert, replace, ...)
            entity_type: Entity type
            reason: Underlying failure
            details: Additional details
        """
        message = (
            f"Store error during '{operation}' "
            f"on {entity_type}: {reason}"
        )
        super().__init__(
            message=message,
            details={
                "operation": operation,
                "entity_type": entity_type,
                "reason": reason,
                **(details or {})
            },
            error_code="STORE_ERROR"
        )
