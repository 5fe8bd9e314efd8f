"""Command schemas"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class CommandStatus(str, Enum):
    """Lifecycle status of a command"""

    ACTIVE = "ACTIVE"
    DEPRECATED = "DEPRECATED"
    INACTIVE = "INACTIVE"


class Command(BaseModel):
    """Read model of a command referencing applications"""

    id: str
    name: str
    user: str
    version: str | None = None
    status: CommandStatus = CommandStatus.INACTIVE
    executable: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True, "frozen": True}
