"""
Application configuration service.

``ApplicationConfigService`` is the public contract; ``ApplicationConfigServiceImpl``
implements it on top of the entity store ports. Implementations must be safe
under concurrent use: read-modify-write cycles on one application are
serialized per attribute family, everything else runs in parallel.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Set

from appconfig.concurrency import KeyedLockManager
from appconfig.core.config import settings
from appconfig.core.errors import ConflictError, NotFoundError, ValidationError
from appconfig.repositories.base import ApplicationStore, CommandStore
from appconfig.schemas.application import Application, ApplicationStatus, AttributeFamily
from appconfig.schemas.command import Command
from appconfig.services.application_query import ApplicationQuery, ApplicationQueryEngine
from appconfig.utils.validators import ApplicationValidator

logger = logging.getLogger("appconfig.services.application_service")

ENTITY_TYPE = "Application"


def _materialize(items):
    # Single-pass iterables must survive validation
    if items is None or isinstance(items, (str, set, frozenset, list, tuple)):
        return items
    return list(items)


class ApplicationConfigService(ABC):
    """Contract for managing applications and their config, jar and tag sets."""

    # Lifecycle

    @abstractmethod
    async def create_application(self, app: Application) -> Application:
        """
        Create a new application.

        Raises:
            ValidationError: If name or user is blank
            ConflictError: If the id is already taken
        """

    @abstractmethod
    async def get_application(self, id: str) -> Application:
        """
        Get the application with the given id.

        Raises:
            NotFoundError: If it does not exist
        """

    @abstractmethod
    async def get_applications(
        self,
        name: Optional[str] = None,
        user_name: Optional[str] = None,
        statuses: Optional[Iterable[ApplicationStatus]] = None,
        tags: Optional[Iterable[str]] = None,
        page: int = 0,
        limit: Optional[int] = None,
        descending: bool = True,
        order_bys: Optional[Iterable[str]] = None,
    ) -> List[Application]:
        """List applications matching every given criterion."""

    @abstractmethod
    async def update_application(self, id: str, update_app: Application) -> Application:
        """Replace every mutable field of an application."""

    @abstractmethod
    async def delete_all_applications(self) -> List[Application]:
        """Delete every application and return what was removed."""

    @abstractmethod
    async def delete_application(self, id: str) -> Application:
        """Delete an application and return it."""

    # Configs

    @abstractmethod
    async def add_configs_to_application(self, id: str, configs: Set[str]) -> Set[str]:
        """Add configuration files; returns the resulting set."""

    @abstractmethod
    async def get_configs_for_application(self, id: str) -> Set[str]:
        """Current configuration files."""

    @abstractmethod
    async def update_configs_for_application(self, id: str, configs: Set[str]) -> Set[str]:
        """Replace all configuration files."""

    @abstractmethod
    async def remove_all_configs_for_application(self, id: str) -> Set[str]:
        """Remove every configuration file; returns the empty set."""

    @abstractmethod
    async def remove_config_for_application(self, id: str, config: str) -> Set[str]:
        """Remove one configuration file if present."""

    # Jars

    @abstractmethod
    async def add_jars_for_application(self, id: str, jars: Set[str]) -> Set[str]:
        """Add jar files; returns the resulting set."""

    @abstractmethod
    async def get_jars_for_application(self, id: str) -> Set[str]:
        """Current jar files."""

    @abstractmethod
    async def update_jars_for_application(self, id: str, jars: Set[str]) -> Set[str]:
        """Replace all jar files."""

    @abstractmethod
    async def remove_all_jars_for_application(self, id: str) -> Set[str]:
        """Remove every jar file; returns the empty set."""

    @abstractmethod
    async def remove_jar_for_application(self, id: str, jar: str) -> Set[str]:
        """Remove one jar file if present."""

    # Tags

    @abstractmethod
    async def add_tags_for_application(self, id: str, tags: Set[str]) -> Set[str]:
        """Add tags; returns the resulting set."""

    @abstractmethod
    async def get_tags_for_application(self, id: str) -> Set[str]:
        """Current tags."""

    @abstractmethod
    async def update_tags_for_application(self, id: str, tags: Set[str]) -> Set[str]:
        """Replace all tags."""

    @abstractmethod
    async def remove_all_tags_for_application(self, id: str) -> Set[str]:
        """Remove every tag; returns the empty set."""

    @abstractmethod
    async def remove_tag_for_application(self, id: str, tag: str) -> Set[str]:
        """Remove one tag if present."""

    # Derived relation

    @abstractmethod
    async def get_commands_for_application(self, id: str) -> Set[Command]:
        """Commands that reference the application."""


class ApplicationConfigServiceImpl(ApplicationConfigService):
    """
    Store-backed implementation of ``ApplicationConfigService``.

    Attributes:
        _store: Application entity store
        _command_store: Reverse lookup into the command subsystem
        _locks: Per-key locks for read-modify-write cycles
        _validator: Field-level checks
        _query_engine: Listing engine

    Example:
        >>> service = ApplicationConfigServiceImpl(
        ...     SqlApplicationStore(async_session_maker),
        ...     SqlCommandStore(async_session_maker),
        ... )
        >>> app = await service.create_application(Application(name="spark", user="etl"))
        >>> await service.add_tags_for_application(app.id, {"prod"})
        {'prod'}
    """

    def __init__(
        self,
        store: ApplicationStore,
        command_store: CommandStore,
        lock_manager: Optional[KeyedLockManager] = None,
        validator: Optional[ApplicationValidator] = None,
        default_page_limit: Optional[int] = None,
    ):
        self._store = store
        self._command_store = command_store
        self._locks = lock_manager or KeyedLockManager()
        self._validator = validator or ApplicationValidator()
        self._query_engine = ApplicationQueryEngine(store, self._validator)
        self._default_page_limit = default_page_limit or settings.default_page_limit

    # ==================== Lifecycle ====================

    async def create_application(self, app: Application) -> Application:
        self._validator.check_application(app)
        app_id = app.id or str(uuid.uuid4())

        async with self._locks.lock_many(self._entity_keys(app_id)):
            if await self._store.exists(app_id):
                raise ConflictError(ENTITY_TYPE, app_id)

            now = datetime.now(timezone.utc)
            await self._store.insert(
                app.model_copy(
                    update={
                        "id": app_id,
                        "configs": set(app.configs),
                        "jars": set(app.jars),
                        "tags": set(app.tags),
                        "created_at": now,
                        "updated_at": now,
                        "entity_version": 0,
                    }
                )
            )
            created = await self._store.get(app_id)

        logger.info(f"Application created: {app_id} ({app.name})")
        return created

    async def get_application(self, id: str) -> Application:
        self._validator.check_id(id)
        app = await self._store.get(id)
        if app is None:
            raise NotFoundError(ENTITY_TYPE, id)
        return app

    async def get_applications(
        self,
        name: Optional[str] = None,
        user_name: Optional[str] = None,
        statuses: Optional[Iterable[ApplicationStatus]] = None,
        tags: Optional[Iterable[str]] = None,
        page: int = 0,
        limit: Optional[int] = None,
        descending: bool = True,
        order_bys: Optional[Iterable[str]] = None,
    ) -> List[Application]:
        for field, values in (("statuses", statuses), ("tags", tags), ("order_bys", order_bys)):
            self._validator.check_criteria(values, field)

        try:
            status_set = frozenset(ApplicationStatus(s) for s in statuses or ())
        except ValueError as e:
            raise ValidationError(field="statuses", reason=str(e))

        query = ApplicationQuery(
            name=name or None,
            user_name=user_name or None,
            statuses=status_set,
            tags=frozenset(tags or ()),
            page=page,
            limit=self._default_page_limit if limit is None else limit,
            descending=descending,
            order_bys=tuple(order_bys or ()),
        )
        return await self._query_engine.find(query)

    async def update_application(self, id: str, update_app: Application) -> Application:
        self._validator.check_id(id)
        self._validator.check_application(update_app)
        if update_app.id is not None and update_app.id != id:
            raise ValidationError(
                field="id",
                reason=f"application id '{update_app.id}' does not match '{id}'",
            )

        async with self._locks.lock_many(self._entity_keys(id)):
            while True:
                current = await self._store.get(id)
                if current is None:
                    raise NotFoundError(ENTITY_TYPE, id)

                replacement = current.model_copy(
                    update={
                        "name": update_app.name,
                        "user": update_app.user,
                        "version": update_app.version,
                        "status": update_app.status,
                        "setup_file": update_app.setup_file,
                        "configs": set(update_app.configs),
                        "jars": set(update_app.jars),
                        "tags": set(update_app.tags),
                        "updated_at": datetime.now(timezone.utc),
                        "entity_version": current.entity_version + 1,
                    }
                )
                if await self._store.replace(replacement, expected_version=current.entity_version):
                    break
                logger.debug(f"Application {id} changed during update, retrying")
            updated = await self._store.get(id)

        logger.info(f"Application updated: {id}")
        return updated

    async def delete_all_applications(self) -> List[Application]:
        removed = await self._store.delete_all()
        logger.info(f"Deleted all applications ({len(removed)})")
        return removed

    async def delete_application(self, id: str) -> Application:
        self._validator.check_id(id)
        async with self._locks.lock_many(self._entity_keys(id)):
            removed = await self._store.delete(id)
        if removed is None:
            raise NotFoundError(ENTITY_TYPE, id)

        logger.info(f"Application deleted: {id}")
        return removed

    # ==================== Configs ====================

    async def add_configs_to_application(self, id: str, configs: Set[str]) -> Set[str]:
        return await self._add_items(id, AttributeFamily.CONFIGS, configs)

    async def get_configs_for_application(self, id: str) -> Set[str]:
        return await self._get_items(id, AttributeFamily.CONFIGS)

    async def update_configs_for_application(self, id: str, configs: Set[str]) -> Set[str]:
        return await self._replace_items(id, AttributeFamily.CONFIGS, configs)

    async def remove_all_configs_for_application(self, id: str) -> Set[str]:
        return await self._clear_items(id, AttributeFamily.CONFIGS)

    async def remove_config_for_application(self, id: str, config: str) -> Set[str]:
        return await self._discard_item(id, AttributeFamily.CONFIGS, config)

    # ==================== Jars ====================

    async def add_jars_for_application(self, id: str, jars: Set[str]) -> Set[str]:
        return await self._add_items(id, AttributeFamily.JARS, jars)

    async def get_jars_for_application(self, id: str) -> Set[str]:
        return await self._get_items(id, AttributeFamily.JARS)

    async def update_jars_for_application(self, id: str, jars: Set[str]) -> Set[str]:
        return await self._replace_items(id, AttributeFamily.JARS, jars)

    async def remove_all_jars_for_application(self, id: str) -> Set[str]:
        return await self._clear_items(id, AttributeFamily.JARS)

    async def remove_jar_for_application(self, id: str, jar: str) -> Set[str]:
        return await self._discard_item(id, AttributeFamily.JARS, jar)

    # ==================== Tags ====================

    async def add_tags_for_application(self, id: str, tags: Set[str]) -> Set[str]:
        return await self._add_items(id, AttributeFamily.TAGS, tags)

    async def get_tags_for_application(self, id: str) -> Set[str]:
        return await self._get_items(id, AttributeFamily.TAGS)

    async def update_tags_for_application(self, id: str, tags: Set[str]) -> Set[str]:
        return await self._replace_items(id, AttributeFamily.TAGS, tags)

    async def remove_all_tags_for_application(self, id: str) -> Set[str]:
        return await self._clear_items(id, AttributeFamily.TAGS)

    async def remove_tag_for_application(self, id: str, tag: str) -> Set[str]:
        return await self._discard_item(id, AttributeFamily.TAGS, tag)

    # ==================== Derived relation ====================

    async def get_commands_for_application(self, id: str) -> Set[Command]:
        self._validator.check_id(id)
        if not await self._store.exists(id):
            raise NotFoundError(ENTITY_TYPE, id)
        return await self._command_store.find_by_application(id)

    # ==================== Set algebra ====================

    async def _add_items(self, id: str, family: AttributeFamily, items: Iterable[str]) -> Set[str]:
        self._validator.check_id(id)
        items = _materialize(items)
        self._validator.check_items(items, family.value)
        result = await self._modify_family(id, family, lambda current: current | set(items))
        logger.info(f"Added {family.value} to application {id}: {len(result)} total")
        return result

    async def _get_items(self, id: str, family: AttributeFamily) -> Set[str]:
        self._validator.check_id(id)
        return await self._read_family(id, family)

    async def _replace_items(self, id: str, family: AttributeFamily, items: Iterable[str]) -> Set[str]:
        self._validator.check_id(id)
        items = _materialize(items)
        self._validator.check_items(items, family.value)
        result = set(items)
        async with self._locks.lock(self._family_key(id, family)):
            await self._write_family(id, family, result)
        logger.info(f"Replaced {family.value} of application {id}: {len(result)} total")
        return result

    async def _clear_items(self, id: str, family: AttributeFamily) -> Set[str]:
        self._validator.check_id(id)
        async with self._locks.lock(self._family_key(id, family)):
            await self._write_family(id, family, set())
        logger.info(f"Cleared {family.value} of application {id}")
        return set()

    async def _discard_item(self, id: str, family: AttributeFamily, item: str) -> Set[str]:
        self._validator.check_id(id)
        self._validator.check_item(item, family.value)
        result = await self._modify_family(id, family, lambda current: current - {item})
        logger.info(f"Removed {item} from {family.value} of application {id}")
        return result

    async def _modify_family(
        self,
        id: str,
        family: AttributeFamily,
        change: Callable[[Set[str]], Set[str]],
    ) -> Set[str]:
        """
        Apply ``change`` to one family and store the result.

        The write is conditional on the version that was read, so a writer
        outside this process (another worker on the same database) forces a
        re-read instead of being overwritten. An unchanged set is not written.
        """
        async with self._locks.lock(self._family_key(id, family)):
            while True:
                snapshot = await self._store.get_versioned_attribute(id, family)
                if snapshot is None:
                    raise NotFoundError(ENTITY_TYPE, id)
                current, version = snapshot
                result = change(set(current))
                if result == current:
                    return result
                if await self._store.set_attribute(id, family, result, expected_version=version):
                    return result
                logger.debug(f"{family.value} of application {id} changed concurrently, retrying")

    async def _read_family(self, id: str, family: AttributeFamily) -> Set[str]:
        values = await self._store.get_attribute(id, family)
        if values is None:
            raise NotFoundError(ENTITY_TYPE, id)
        return set(values)

    async def _write_family(self, id: str, family: AttributeFamily, values: Set[str]) -> None:
        if not await self._store.set_attribute(id, family, values):
            raise NotFoundError(ENTITY_TYPE, id)

    @staticmethod
    def _family_key(id: str, family: AttributeFamily) -> str:
        return f"{id}:{family.value}"

    @classmethod
    def _entity_keys(cls, id: str) -> List[str]:
        return [cls._family_key(id, family) for family in AttributeFamily]
