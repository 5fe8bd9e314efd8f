"""
Filtering, ordering and paging of application listings.

Criteria become a predicate handed to ``ApplicationStore.scan``; ordering and
offset paging are applied to the matches in memory.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from appconfig.core.errors import ValidationError
from appconfig.repositories.base import ApplicationPredicate, ApplicationStore
from appconfig.schemas.application import Application, ApplicationStatus
from appconfig.utils.validators import ApplicationValidator

logger = logging.getLogger("appconfig.services.application_query")

# Public sort names -> entity attribute
SORTABLE_FIELDS = {
    "id": "id",
    "name": "name",
    "user": "user",
    "userName": "user",
    "version": "version",
    "status": "status",
    "created": "created_at",
    "created_at": "created_at",
    "updated": "updated_at",
    "updated_at": "updated_at",
}

DEFAULT_ORDER_BY = ("created_at",)

NAME_WILDCARD = "%"


@dataclass(frozen=True)
class ApplicationQuery:
    """Listing criteria; ``None`` or empty means no constraint."""

    name: Optional[str] = None
    user_name: Optional[str] = None
    statuses: frozenset[ApplicationStatus] = field(default_factory=frozenset)
    tags: frozenset[str] = field(default_factory=frozenset)
    page: int = 0
    limit: int = 1024
    descending: bool = True
    order_bys: tuple[str, ...] = ()


def _name_matcher(pattern: str) -> Callable[[str], bool]:
    if NAME_WILDCARD not in pattern:
        return lambda value: value == pattern
    regex = re.compile(
        ".*".join(re.escape(part) for part in pattern.split(NAME_WILDCARD)),
        re.DOTALL,
    )
    return lambda value: regex.fullmatch(value) is not None


def _sort_value(value: Any) -> tuple[bool, Any]:
    # None sorts after every real value when ascending
    if value is None:
        return True, ""
    if isinstance(value, ApplicationStatus):
        return False, value.value
    return False, value


class ApplicationQueryEngine:
    """
    Translates an ``ApplicationQuery`` into a store scan plus ordering.

    Example:
        >>> engine = ApplicationQueryEngine(store)
        >>> apps = await engine.find(ApplicationQuery(tags=frozenset({"prod"})))
    """

    def __init__(self, store: ApplicationStore, validator: ApplicationValidator | None = None):
        self._store = store
        self._validator = validator or ApplicationValidator()

    async def find(self, query: ApplicationQuery) -> list[Application]:
        """
        Run a listing query.

        Raises:
            ValidationError: On negative page, non-positive limit or an
                unknown sort field
        """
        self._validator.check_paging(query.page, query.limit)
        order_fields = self.resolve_order_bys(query.order_bys)

        matches = await self._store.scan(self.build_predicate(query))
        ordered = self.sort(matches, order_fields, query.descending)
        start = query.page * query.limit
        page = ordered[start:start + query.limit]

        logger.debug(
            f"Listing matched {len(matches)} applications, "
            f"returning {len(page)} (page={query.page}, limit={query.limit})"
        )
        return page

    @staticmethod
    def build_predicate(query: ApplicationQuery) -> ApplicationPredicate:
        checks: list[ApplicationPredicate] = []

        if query.name:
            matches_name = _name_matcher(query.name)
            checks.append(lambda app: app.name is not None and matches_name(app.name))
        if query.user_name:
            checks.append(lambda app: app.user == query.user_name)
        if query.statuses:
            checks.append(lambda app: app.status in query.statuses)
        if query.tags:
            checks.append(lambda app: query.tags <= app.tags)

        return lambda app: all(check(app) for check in checks)

    @staticmethod
    def resolve_order_bys(order_bys: tuple[str, ...] | None) -> tuple[str, ...]:
        """
        Map public sort names to entity attributes.

        Later repetitions of a field are dropped; the first occurrence keeps
        its position.
        """
        resolved: list[str] = []
        for name in order_bys or ():
            attribute = SORTABLE_FIELDS.get(name)
            if attribute is None:
                raise ValidationError(
                    field="order_bys",
                    reason=f"unknown sort field '{name}'",
                    details={"allowed": sorted(SORTABLE_FIELDS)},
                )
            if attribute not in resolved:
                resolved.append(attribute)
        return tuple(resolved) or DEFAULT_ORDER_BY

    @staticmethod
    def sort(
        applications: list[Application],
        order_fields: tuple[str, ...],
        descending: bool
    ) -> list[Application]:
        keys = order_fields if "id" in order_fields else (*order_fields, "id")
        return sorted(
            applications,
            key=lambda app: tuple(_sort_value(getattr(app, key)) for key in keys),
            reverse=descending,
        )
