"""Service modules"""

from appconfig.services.application_query import ApplicationQuery, ApplicationQueryEngine
from appconfig.services.application_service import (
    ApplicationConfigService,
    ApplicationConfigServiceImpl,
)

__all__ = [
    "ApplicationConfigService",
    "ApplicationConfigServiceImpl",
    "ApplicationQuery",
    "ApplicationQueryEngine",
]
