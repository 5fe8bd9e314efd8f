"""Application model"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from appconfig.models.database import Base


class ApplicationModel(Base):
    """Application row; set-valued attributes live in ``application_attributes``"""

    __tablename__ = "applications"

    # Primary key
    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    # Descriptor
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    version: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    setup_file: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Audit
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
    entity_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    attributes: Mapped[list["ApplicationAttributeModel"]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, name={self.name}, status={self.status})>"


class ApplicationAttributeModel(Base):
    """One member of a config, jar or tag set"""

    __tablename__ = "application_attributes"

    application_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("applications.id", ondelete="CASCADE"),
        primary_key=True,
    )
    family: Mapped[str] = mapped_column(String(16), primary_key=True)
    value: Mapped[str] = mapped_column(String(1024), primary_key=True)

    application: Mapped[ApplicationModel] = relationship(back_populates="attributes")

    def __repr__(self) -> str:
        return f"<ApplicationAttribute({self.application_id}, {self.family}={self.value})>"
