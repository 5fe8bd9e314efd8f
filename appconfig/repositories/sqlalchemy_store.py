"""
SQLAlchemy implementation of the entity store ports.

Each call runs in its own session and transaction, so every store operation
is atomic on its own. Driver failures are wrapped into ``StoreError``.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from appconfig.core.errors import ConflictError, StoreError
from appconfig.models.application import ApplicationAttributeModel, ApplicationModel
from appconfig.models.command import CommandModel, command_applications
from appconfig.repositories.base import ApplicationPredicate, ApplicationStore, CommandStore
from appconfig.repositories.mappers import ApplicationMapper, CommandMapper
from appconfig.schemas.application import Application, AttributeFamily
from appconfig.schemas.command import Command

logger = logging.getLogger("appconfig.repositories.sqlalchemy_store")


class SqlApplicationStore(ApplicationStore):
    """
    Application store backed by a relational database.

    Attributes:
        _session_maker: Factory for short-lived async sessions

    Example:
        >>> store = SqlApplicationStore(async_session_maker)
        >>> app = await store.get("app-1")
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self._mapper = ApplicationMapper()

    def _store_error(self, operation: str, error: Exception, **details) -> StoreError:
        logger.error(f"Store failure during {operation}: {error}", exc_info=True)
        return StoreError(
            operation=operation,
            entity_type="Application",
            reason=str(error),
            details=details,
        )

    async def get(self, id: str) -> Optional[Application]:
        try:
            async with self._session_maker() as session:
                model = await session.get(ApplicationModel, id)
                return self._mapper.to_entity(model) if model else None
        except SQLAlchemyError as e:
            raise self._store_error("get", e, application_id=id)

    async def exists(self, id: str) -> bool:
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(ApplicationModel.id).where(ApplicationModel.id == id)
                )
                return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            raise self._store_error("exists", e, application_id=id)

    async def insert(self, application: Application) -> None:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    session.add(self._mapper.to_model(application))
            logger.debug(f"Inserted application {application.id}")
        except IntegrityError:
            raise ConflictError("Application", application.id)
        except SQLAlchemyError as e:
            raise self._store_error("insert", e, application_id=application.id)

    async def replace(
        self,
        application: Application,
        expected_version: Optional[int] = None
    ) -> bool:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    touched = await session.execute(
                        self._versioned_update(application.id, expected_version)
                        .values(**self._mapper.to_values(application))
                    )
                    if touched.rowcount == 0:
                        return False
                    await session.execute(
                        delete(ApplicationAttributeModel).where(
                            ApplicationAttributeModel.application_id == application.id
                        )
                    )
                    rows = self._mapper.to_attribute_rows(application)
                    if rows:
                        await session.execute(insert(ApplicationAttributeModel), rows)
            logger.debug(f"Replaced application {application.id}")
            return True
        except SQLAlchemyError as e:
            raise self._store_error("replace", e, application_id=application.id)

    async def delete(self, id: str) -> Optional[Application]:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    model = await session.get(ApplicationModel, id)
                    if model is None:
                        return None
                    removed = self._mapper.to_entity(model)
                    # Detach from commands; the commands themselves stay
                    await session.execute(
                        delete(command_applications).where(
                            command_applications.c.application_id == id
                        )
                    )
                    await session.delete(model)
            logger.debug(f"Deleted application {id}")
            return removed
        except SQLAlchemyError as e:
            raise self._store_error("delete", e, application_id=id)

    async def delete_all(self) -> List[Application]:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    result = await session.execute(self._ordered_select())
                    models = result.scalars().all()
                    removed = [self._mapper.to_entity(model) for model in models]
                    await session.execute(delete(command_applications))
                    await session.execute(delete(ApplicationAttributeModel))
                    await session.execute(delete(ApplicationModel))
            logger.debug(f"Deleted {len(removed)} applications")
            return removed
        except SQLAlchemyError as e:
            raise self._store_error("delete_all", e)

    async def scan(self, predicate: ApplicationPredicate) -> List[Application]:
        try:
            async with self._session_maker() as session:
                result = await session.execute(self._ordered_select())
                entities = [self._mapper.to_entity(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._store_error("scan", e)
        return [entity for entity in entities if predicate(entity)]

    async def get_attribute(self, id: str, family: AttributeFamily) -> Optional[Set[str]]:
        snapshot = await self._read_attribute(id, family, "get_attribute")
        return snapshot[0] if snapshot else None

    async def get_versioned_attribute(
        self,
        id: str,
        family: AttributeFamily
    ) -> Optional[Tuple[Set[str], int]]:
        return await self._read_attribute(id, family, "get_versioned_attribute")

    async def _read_attribute(
        self,
        id: str,
        family: AttributeFamily,
        operation: str
    ) -> Optional[Tuple[Set[str], int]]:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    found = await session.execute(
                        select(ApplicationModel.entity_version).where(ApplicationModel.id == id)
                    )
                    version = found.scalar_one_or_none()
                    if version is None:
                        return None
                    result = await session.execute(
                        select(ApplicationAttributeModel.value).where(
                            ApplicationAttributeModel.application_id == id,
                            ApplicationAttributeModel.family == family.value,
                        )
                    )
                    return set(result.scalars().all()), version
        except SQLAlchemyError as e:
            raise self._store_error(operation, e, application_id=id, family=family.value)

    async def set_attribute(
        self,
        id: str,
        family: AttributeFamily,
        values: Set[str],
        expected_version: Optional[int] = None
    ) -> bool:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    touched = await session.execute(
                        self._versioned_update(id, expected_version)
                        .values(
                            updated_at=datetime.now(timezone.utc),
                            entity_version=ApplicationModel.entity_version + 1,
                        )
                    )
                    if touched.rowcount == 0:
                        return False
                    await session.execute(
                        delete(ApplicationAttributeModel).where(
                            ApplicationAttributeModel.application_id == id,
                            ApplicationAttributeModel.family == family.value,
                        )
                    )
                    if values:
                        await session.execute(
                            insert(ApplicationAttributeModel),
                            [
                                {"application_id": id, "family": family.value, "value": value}
                                for value in sorted(values)
                            ],
                        )
            logger.debug(f"Wrote {len(values)} {family.value} for application {id}")
            return True
        except SQLAlchemyError as e:
            raise self._store_error("set_attribute", e, application_id=id, family=family.value)

    @staticmethod
    def _versioned_update(id: str, expected_version: Optional[int]):
        statement = update(ApplicationModel).where(ApplicationModel.id == id)
        if expected_version is not None:
            statement = statement.where(ApplicationModel.entity_version == expected_version)
        return statement

    @staticmethod
    def _ordered_select():
        return select(ApplicationModel).order_by(
            ApplicationModel.created_at, ApplicationModel.id
        )


class SqlCommandStore(CommandStore):
    """Command lookup backed by the ``command_applications`` association table."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def find_by_application(self, application_id: str) -> Set[Command]:
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(CommandModel)
                    .join(
                        command_applications,
                        command_applications.c.command_id == CommandModel.id,
                    )
                    .where(command_applications.c.application_id == application_id)
                )
                return {CommandMapper.to_entity(model) for model in result.scalars().all()}
        except SQLAlchemyError as e:
            logger.error(f"Store failure during find_by_application: {e}", exc_info=True)
            raise StoreError(
                operation="find_by_application",
                entity_type="Command",
                reason=str(e),
                details={"application_id": application_id},
            )

    async def save(self, command: Command, application_ids: Set[str]) -> None:
        """
        Insert or update a command and its application links.

        The command subsystem owns these rows; this method exists for seeding
        and tests.
        """
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    model = await session.get(CommandModel, command.id)
                    if model is None:
                        model = CommandModel(id=command.id)
                        session.add(model)
                    model.name = command.name
                    model.user = command.user
                    model.version = command.version
                    model.status = command.status.value
                    model.executable = command.executable
                    model.updated_at = datetime.now(timezone.utc)
                    await session.flush()

                    await session.execute(
                        delete(command_applications).where(
                            command_applications.c.command_id == command.id
                        )
                    )
                    if application_ids:
                        await session.execute(
                            insert(command_applications),
                            [
                                {"command_id": command.id, "application_id": app_id}
                                for app_id in sorted(application_ids)
                            ],
                        )
        except SQLAlchemyError as e:
            logger.error(f"Store failure during save: {e}", exc_info=True)
            raise StoreError(
                operation="save",
                entity_type="Command",
                reason=str(e),
                details={"command_id": command.id},
            )
