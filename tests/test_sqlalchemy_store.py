"""
Integration tests for the SQL entity store.

Uses a real SQLite database file through aiosqlite.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from appconfig.core.errors import ConflictError, StoreError
from appconfig.repositories import SqlApplicationStore
from appconfig.schemas import Application, ApplicationStatus, AttributeFamily, Command


def make_app(app_id: str, **overrides) -> Application:
    now = datetime.now(timezone.utc)
    fields = {
        "id": app_id,
        "name": app_id,
        "user": "etl",
        "status": ApplicationStatus.ACTIVE,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Application(**fields)


class TestSqlApplicationStore:

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        await store.insert(make_app("app-1", configs={"a.xml"}, jars={"a.jar"}, tags={"prod"}))

        found = await store.get("app-1")

        assert found.id == "app-1"
        assert found.status is ApplicationStatus.ACTIVE
        assert found.configs == {"a.xml"}
        assert found.jars == {"a.jar"}
        assert found.tags == {"prod"}

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("missing") is None
        assert await store.exists("missing") is False

    @pytest.mark.asyncio
    async def test_insert_duplicate(self, store):
        await store.insert(make_app("app-1"))

        with pytest.raises(ConflictError):
            await store.insert(make_app("app-1"))

    @pytest.mark.asyncio
    async def test_same_value_in_different_families(self, store):
        await store.insert(make_app("app-1", configs={"x"}, jars={"x"}, tags={"x"}))

        found = await store.get("app-1")

        assert found.configs == found.jars == found.tags == {"x"}

    @pytest.mark.asyncio
    async def test_replace(self, store):
        await store.insert(make_app("app-1", configs={"a", "b"}, tags={"old"}))
        current = await store.get("app-1")

        replaced = await store.replace(
            current.model_copy(update={"name": "renamed", "configs": {"b", "c"}, "tags": set()})
        )

        found = await store.get("app-1")
        assert replaced is True
        assert found.name == "renamed"
        assert found.configs == {"b", "c"}
        assert found.tags == set()
        assert found.created_at == current.created_at

    @pytest.mark.asyncio
    async def test_replace_missing(self, store):
        assert await store.replace(make_app("missing")) is False

    @pytest.mark.asyncio
    async def test_attribute_round_trip(self, store):
        await store.insert(make_app("app-1", jars={"keep.jar"}))

        assert await store.set_attribute("app-1", AttributeFamily.TAGS, {"a", "b"}) is True
        assert await store.get_attribute("app-1", AttributeFamily.TAGS) == {"a", "b"}
        assert await store.get_attribute("app-1", AttributeFamily.JARS) == {"keep.jar"}

        assert await store.set_attribute("app-1", AttributeFamily.TAGS, set()) is True
        assert await store.get_attribute("app-1", AttributeFamily.TAGS) == set()
        assert (await store.get("app-1")).entity_version == 2

    @pytest.mark.asyncio
    async def test_attribute_on_missing_application(self, store):
        assert await store.get_attribute("missing", AttributeFamily.CONFIGS) is None
        assert await store.set_attribute("missing", AttributeFamily.CONFIGS, {"a"}) is False

    @pytest.mark.asyncio
    async def test_conditional_attribute_write(self, store):
        await store.insert(make_app("app-1", tags={"a"}))

        values, version = await store.get_versioned_attribute("app-1", AttributeFamily.TAGS)
        assert values == {"a"}
        assert version == 0

        assert await store.set_attribute("app-1", AttributeFamily.JARS, {"x.jar"}) is True
        stale = await store.set_attribute(
            "app-1", AttributeFamily.TAGS, {"a", "b"}, expected_version=version
        )
        fresh = await store.set_attribute(
            "app-1", AttributeFamily.TAGS, {"a", "c"}, expected_version=version + 1
        )

        assert stale is False
        assert fresh is True
        assert await store.get_versioned_attribute("app-1", AttributeFamily.TAGS) == ({"a", "c"}, 2)
        assert await store.get_versioned_attribute("missing", AttributeFamily.TAGS) is None

    @pytest.mark.asyncio
    async def test_conditional_replace(self, store):
        await store.insert(make_app("app-1"))
        current = await store.get("app-1")
        renamed = current.model_copy(update={"name": "renamed", "entity_version": 1})

        assert await store.replace(renamed, expected_version=5) is False
        assert await store.replace(renamed, expected_version=0) is True
        assert (await store.get("app-1")).name == "renamed"

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.insert(make_app("app-1", tags={"prod"}))

        removed = await store.delete("app-1")

        assert removed.tags == {"prod"}
        assert await store.get("app-1") is None
        assert await store.delete("app-1") is None

    @pytest.mark.asyncio
    async def test_delete_all_keeps_commands(self, store, command_store):
        await store.insert(make_app("app-1"))
        await store.insert(make_app("app-2"))
        await command_store.save(Command(id="cmd", name="cmd", user="etl"), {"app-1", "app-2"})

        removed = await store.delete_all()

        assert {app.id for app in removed} == {"app-1", "app-2"}
        assert await store.scan(lambda app: True) == []
        assert await command_store.find_by_application("app-1") == set()

        await store.insert(make_app("app-1"))
        await command_store.save(Command(id="cmd", name="cmd", user="etl"), {"app-1"})
        assert {c.id for c in await command_store.find_by_application("app-1")} == {"cmd"}

    @pytest.mark.asyncio
    async def test_scan_filters_in_creation_order(self, store):
        for i in range(4):
            await store.insert(make_app(f"app-{i}", tags={"even"} if i % 2 == 0 else set()))

        result = await store.scan(lambda app: "even" in app.tags)

        assert [app.id for app in result] == ["app-0", "app-2"]


class TestStoreErrors:

    @pytest.mark.asyncio
    async def test_driver_errors_become_store_errors(self):
        class BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT", {}, Exception("unable to open database file"))

            async def __aexit__(self, *exc):
                return False

        store = SqlApplicationStore(lambda: BrokenSession())

        with pytest.raises(StoreError) as exc_info:
            await store.get("app-1")

        assert exc_info.value.details["operation"] == "get"
        assert "unable to open database file" in exc_info.value.details["reason"]
