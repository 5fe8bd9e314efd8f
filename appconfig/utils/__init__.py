"""Utility functions"""

from appconfig.utils.validators import (
    ApplicationValidator,
    validate_criteria,
    validate_items,
    validate_paging,
    validate_required_text,
)

__all__ = [
    "ApplicationValidator",
    "validate_criteria",
    "validate_items",
    "validate_paging",
    "validate_required_text",
]
