"""
Entity store ports.

The service talks to persistence only through these interfaces. Any backend
(SQL, document store, remote API) can be plugged in by implementing them.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set, Tuple

from appconfig.schemas.application import Application, AttributeFamily
from appconfig.schemas.command import Command

ApplicationPredicate = Callable[[Application], bool]


class ApplicationStore(ABC):
    """
    Durable keyed storage for applications.

    Every method is atomic: it either applies completely or raises
    ``StoreError`` and leaves the stored state unchanged.
    """

    @abstractmethod
    async def get(self, id: str) -> Optional[Application]:
        """
        Get an application by id.

        Returns:
            The application, or None if it does not exist
        """
        pass

    @abstractmethod
    async def exists(self, id: str) -> bool:
        """Check whether an application with ``id`` exists."""
        pass

    @abstractmethod
    async def insert(self, application: Application) -> None:
        """
        Insert a new application.

        Raises:
            ConflictError: If the id is already taken
        """
        pass

    @abstractmethod
    async def replace(
        self,
        application: Application,
        expected_version: Optional[int] = None
    ) -> bool:
        """
        Replace every stored field of an existing application.

        Args:
            application: New state, including its ``entity_version``
            expected_version: Only write if the stored ``entity_version``
                still equals this value

        Returns:
            True if replaced, False if the application does not exist or
            its version moved on
        """
        pass

    @abstractmethod
    async def delete(self, id: str) -> Optional[Application]:
        """
        Delete an application.

        Returns:
            The removed application, or None if it did not exist
        """
        pass

    @abstractmethod
    async def delete_all(self) -> List[Application]:
        """Delete every application and return what was removed."""
        pass

    @abstractmethod
    async def scan(self, predicate: ApplicationPredicate) -> List[Application]:
        """
        Return every application matching ``predicate``.

        Results come back in creation order.
        """
        pass

    @abstractmethod
    async def get_attribute(self, id: str, family: AttributeFamily) -> Optional[Set[str]]:
        """
        Read one attribute family.

        Returns:
            The current set, or None if the application does not exist
        """
        pass

    @abstractmethod
    async def get_versioned_attribute(
        self,
        id: str,
        family: AttributeFamily
    ) -> Optional[Tuple[Set[str], int]]:
        """
        Read one attribute family together with the entity version it was
        read at, for a later conditional ``set_attribute``.

        Returns:
            ``(values, entity_version)``, or None if the application does not exist
        """
        pass

    @abstractmethod
    async def set_attribute(
        self,
        id: str,
        family: AttributeFamily,
        values: Set[str],
        expected_version: Optional[int] = None
    ) -> bool:
        """
        Overwrite one attribute family, leaving the other families untouched.

        Every write increments ``entity_version``. With ``expected_version``
        the write only happens if the stored version still matches.

        Returns:
            True if written, False if the application does not exist or
            its version moved on
        """
        pass


class CommandStore(ABC):
    """Reverse lookup into the command subsystem."""

    @abstractmethod
    async def find_by_application(self, application_id: str) -> Set[Command]:
        """Return every command that references ``application_id``."""
        pass
