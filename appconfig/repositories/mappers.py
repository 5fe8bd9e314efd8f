"""
Mapping between SQLAlchemy rows and pydantic entities.
"""

from datetime import datetime, timezone

from appconfig.models.application import ApplicationAttributeModel, ApplicationModel
from appconfig.models.command import CommandModel
from appconfig.schemas.application import Application, ApplicationStatus, AttributeFamily
from appconfig.schemas.command import Command, CommandStatus


class ApplicationMapper:
    """Converts applications between the ORM and the entity schema."""

    @staticmethod
    def to_entity(model: ApplicationModel) -> Application:
        families: dict[str, set[str]] = {family.value: set() for family in AttributeFamily}
        for attribute in model.attributes:
            families[attribute.family].add(attribute.value)

        return Application(
            id=model.id,
            name=model.name,
            user=model.user,
            version=model.version,
            status=ApplicationStatus(model.status),
            setup_file=model.setup_file,
            created_at=model.created_at,
            updated_at=model.updated_at,
            entity_version=model.entity_version,
            **families,
        )

    @staticmethod
    def to_attributes(
        application_id: str,
        family: AttributeFamily,
        values: set[str]
    ) -> list[ApplicationAttributeModel]:
        return [
            ApplicationAttributeModel(
                application_id=application_id,
                family=family.value,
                value=value,
            )
            for value in sorted(values)
        ]

    @classmethod
    def to_model(cls, entity: Application) -> ApplicationModel:
        model = ApplicationModel(id=entity.id, **cls.to_values(entity))
        if entity.created_at is not None:
            model.created_at = entity.created_at
        model.attributes = [
            attribute
            for family in AttributeFamily
            for attribute in cls.to_attributes(entity.id, family, entity.get_family(family))
        ]
        return model

    @staticmethod
    def to_values(entity: Application) -> dict:
        """Column values of the mutable descriptor fields."""
        return {
            "name": entity.name,
            "user": entity.user,
            "version": entity.version,
            "status": entity.status.value,
            "setup_file": entity.setup_file,
            "updated_at": entity.updated_at or datetime.now(timezone.utc),
            "entity_version": entity.entity_version,
        }

    @staticmethod
    def to_attribute_rows(entity: Application) -> list[dict]:
        return [
            {"application_id": entity.id, "family": family.value, "value": value}
            for family in AttributeFamily
            for value in sorted(entity.get_family(family))
        ]


class CommandMapper:
    """Converts command rows to the read model."""

    @staticmethod
    def to_entity(model: CommandModel) -> Command:
        return Command(
            id=model.id,
            name=model.name,
            user=model.user,
            version=model.version,
            status=CommandStatus(model.status),
            executable=model.executable,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
