"""FastAPI dependencies"""

from typing import Annotated

from fastapi import Depends

from appconfig.models.database import async_session_maker
from appconfig.repositories import SqlApplicationStore, SqlCommandStore
from appconfig.services import ApplicationConfigService, ApplicationConfigServiceImpl

# One service per process so every request shares the same lock table
application_service = ApplicationConfigServiceImpl(
    SqlApplicationStore(async_session_maker),
    SqlCommandStore(async_session_maker),
)


def get_application_service() -> ApplicationConfigService:
    """Get application config service instance"""
    return application_service


ApplicationServiceDep = Annotated[ApplicationConfigService, Depends(get_application_service)]
