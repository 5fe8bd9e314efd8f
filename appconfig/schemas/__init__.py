"""Pydantic schemas"""

from appconfig.schemas.application import (
    Application,
    ApplicationStatus,
    AttributeFamily,
)
from appconfig.schemas.command import Command, CommandStatus

__all__ = [
    # Application
    "Application",
    "ApplicationStatus",
    "AttributeFamily",
    # Command
    "Command",
    "CommandStatus",
]
