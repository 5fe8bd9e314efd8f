"""Database models"""

from appconfig.models.application import ApplicationAttributeModel, ApplicationModel
from appconfig.models.command import CommandModel, command_applications
from appconfig.models.database import (
    Base,
    async_session_maker,
    close_db,
    create_engine,
    create_session_maker,
    init_db,
)

__all__ = [
    "Base",
    "async_session_maker",
    "create_engine",
    "create_session_maker",
    "init_db",
    "close_db",
    "ApplicationModel",
    "ApplicationAttributeModel",
    "CommandModel",
    "command_applications",
]
