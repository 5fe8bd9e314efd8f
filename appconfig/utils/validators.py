"""Input validation utilities"""

from collections.abc import Iterable

from appconfig.core.errors import ValidationError
from appconfig.schemas.application import Application


def validate_required_text(value: str | None, field: str) -> tuple[bool, str | None]:
    """
    Validate that a text value is present and not blank

    Args:
        value: Value to validate
        field: Field name used in the error message

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None:
        return False, f"{field} is required"

    if not isinstance(value, str):
        return False, f"{field} must be a string"

    if not value.strip():
        return False, f"{field} must not be blank"

    return True, None


def validate_items(items: Iterable[str] | None, field: str) -> tuple[bool, str | None]:
    """
    Validate a non-empty collection of non-blank strings

    Args:
        items: Items to validate
        field: Field name used in the error message

    Returns:
        Tuple of (is_valid, error_message)
    """
    if items is None:
        return False, f"{field} are required"

    if isinstance(items, str):
        return False, f"{field} must be a collection of strings, not a string"

    items = list(items)
    if not items:
        return False, f"{field} must not be empty"

    for item in items:
        is_valid, error = validate_required_text(item, f"each of {field}")
        if not is_valid:
            return False, error

    return True, None


def validate_criteria(values: Iterable[str] | None, field: str) -> tuple[bool, str | None]:
    """
    Validate an optional collection of listing criteria

    ``None`` means unconstrained. A bare string is rejected rather than
    treated as a collection of characters.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if values is None:
        return True, None

    if isinstance(values, (str, bytes)):
        return False, f"{field} must be a collection of strings, not a string"

    if not isinstance(values, Iterable):
        return False, f"{field} must be a collection of strings"

    return True, None


def validate_paging(page: int, limit: int) -> tuple[bool, str | None]:
    """
    Validate offset pagination arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    if page < 0:
        return False, "page must be zero or greater"

    if limit < 1:
        return False, "limit must be at least 1"

    return True, None


class ApplicationValidator:
    """Raises ``ValidationError`` for the first failed check."""

    def check_id(self, id: str | None) -> None:
        self._raise_if_invalid("id", *validate_required_text(id, "id"))

    def check_application(self, application: Application | None) -> None:
        """Check the caller-supplied fields of an application"""
        if application is None:
            raise ValidationError(field="application", reason="application is required")

        if application.id is not None:
            self.check_id(application.id)

        for field in ("name", "user"):
            value = getattr(application, field)
            self._raise_if_invalid(field, *validate_required_text(value, field))

        for field in ("configs", "jars", "tags"):
            values = getattr(application, field)
            if values:
                self._raise_if_invalid(field, *validate_items(values, field))

    def check_items(self, items: Iterable[str] | None, field: str) -> None:
        self._raise_if_invalid(field, *validate_items(items, field))

    def check_item(self, item: str | None, field: str) -> None:
        self._raise_if_invalid(field, *validate_required_text(item, field))

    def check_criteria(self, values: Iterable[str] | None, field: str) -> None:
        self._raise_if_invalid(field, *validate_criteria(values, field))

    def check_paging(self, page: int, limit: int) -> None:
        is_valid, error = validate_paging(page, limit)
        self._raise_if_invalid("page" if page < 0 else "limit", is_valid, error)

    @staticmethod
    def _raise_if_invalid(field: str, is_valid: bool, error: str | None) -> None:
        if not is_valid:
            raise ValidationError(field=field, reason=error)
