"""Command model

Commands belong to the job-execution side of the platform. Only the columns
needed to answer "which commands use this application" are mapped here.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from appconfig.models.database import Base

command_applications = Table(
    "command_applications",
    Base.metadata,
    Column(
        "command_id",
        String(255),
        ForeignKey("commands.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "application_id",
        String(255),
        ForeignKey("applications.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class CommandModel(Base):
    """Command row"""

    __tablename__ = "commands"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    user: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    executable: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Command(id={self.id}, name={self.name})>"
