"""Entity store ports and implementations"""

from appconfig.repositories.base import ApplicationPredicate, ApplicationStore, CommandStore
from appconfig.repositories.sqlalchemy_store import SqlApplicationStore, SqlCommandStore

__all__ = [
    "ApplicationPredicate",
    "ApplicationStore",
    "CommandStore",
    "SqlApplicationStore",
    "SqlCommandStore",
]
