"""Application schemas"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ApplicationStatus(str, Enum):
    """Lifecycle status of an application"""

    ACTIVE = "ACTIVE"
    DEPRECATED = "DEPRECATED"
    INACTIVE = "INACTIVE"


class AttributeFamily(str, Enum):
    """Set-valued attribute families of an application"""

    CONFIGS = "configs"
    JARS = "jars"
    TAGS = "tags"


class Application(BaseModel):
    """
    Application entity.

    ``name`` and ``user`` are optional at the schema level so that blank or
    missing values reach the service validator instead of failing on parse.
    Server-assigned fields are ignored on input.
    """

    id: str | None = None
    name: str | None = None
    user: str | None = None
    version: str | None = None
    status: ApplicationStatus = ApplicationStatus.INACTIVE
    setup_file: str | None = None
    configs: set[str] = Field(default_factory=set)
    jars: set[str] = Field(default_factory=set)
    tags: set[str] = Field(default_factory=set)

    created_at: datetime | None = None
    updated_at: datetime | None = None
    entity_version: int = 0

    model_config = {"from_attributes": True}

    def get_family(self, family: AttributeFamily) -> set[str]:
        """Return a copy of one attribute family."""
        return set(getattr(self, family.value))
