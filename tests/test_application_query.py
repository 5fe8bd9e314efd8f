"""
Tests for application listing: filtering, ordering and paging.
"""

import pytest
import pytest_asyncio

from appconfig.core.errors import ValidationError
from appconfig.schemas import Application, ApplicationStatus
from appconfig.services.application_query import ApplicationQuery, ApplicationQueryEngine


@pytest_asyncio.fixture
async def catalog(service):
    """Five applications created in a known order"""
    specs = [
        ("spark-prod", "spark", "etl", ApplicationStatus.ACTIVE, {"prod", "spark"}),
        ("spark-dev", "spark", "dev", ApplicationStatus.INACTIVE, {"prod"}),
        ("hadoop", "hadoop", "etl", ApplicationStatus.DEPRECATED, {"hadoop"}),
        ("hive", "hive", "ops", ApplicationStatus.ACTIVE, set()),
        ("sparkling", "sparkling", "etl", ApplicationStatus.INACTIVE, {"prod", "spark", "beta"}),
    ]
    for app_id, name, user, status, tags in specs:
        await service.create_application(
            Application(id=app_id, name=name, user=user, status=status, tags=tags)
        )
    return service


def ids(applications):
    return [app.id for app in applications]


class TestFilters:

    @pytest.mark.asyncio
    async def test_no_criteria_returns_everything(self, catalog):
        assert len(await catalog.get_applications()) == 5

    @pytest.mark.asyncio
    async def test_tags_require_every_tag(self, catalog):
        result = await catalog.get_applications(tags={"prod", "spark"})

        assert set(ids(result)) == {"spark-prod", "sparkling"}

    @pytest.mark.asyncio
    async def test_statuses_match_any(self, catalog):
        result = await catalog.get_applications(
            statuses={ApplicationStatus.ACTIVE, ApplicationStatus.INACTIVE}
        )

        assert set(ids(result)) == {"spark-prod", "spark-dev", "hive", "sparkling"}

    @pytest.mark.asyncio
    async def test_statuses_accept_names(self, catalog):
        result = await catalog.get_applications(statuses=["DEPRECATED"])

        assert ids(result) == ["hadoop"]

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            await catalog.get_applications(statuses=["RETIRED"])

    @pytest.mark.asyncio
    async def test_name_is_exact_without_wildcard(self, catalog):
        result = await catalog.get_applications(name="spark")

        assert set(ids(result)) == {"spark-prod", "spark-dev"}

    @pytest.mark.asyncio
    async def test_name_wildcard(self, catalog):
        result = await catalog.get_applications(name="spark%")

        assert set(ids(result)) == {"spark-prod", "spark-dev", "sparkling"}

    @pytest.mark.asyncio
    async def test_user_name(self, catalog):
        result = await catalog.get_applications(user_name="etl")

        assert set(ids(result)) == {"spark-prod", "hadoop", "sparkling"}

    @pytest.mark.asyncio
    async def test_criteria_combine(self, catalog):
        result = await catalog.get_applications(
            user_name="etl",
            statuses={ApplicationStatus.INACTIVE},
            tags={"prod"},
        )

        assert ids(result) == ["sparkling"]

    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, catalog):
        assert await catalog.get_applications(name="flink") == []
        assert await catalog.get_applications(tags={"nope"}, page=3) == []

    @pytest.mark.asyncio
    async def test_empty_criteria_mean_unconstrained(self, catalog):
        result = await catalog.get_applications(name="", user_name="", statuses=set(), tags=set())

        assert len(result) == 5


class TestOrdering:

    @pytest.mark.asyncio
    async def test_default_is_newest_first(self, catalog):
        result = await catalog.get_applications()

        assert ids(result) == ["sparkling", "hive", "hadoop", "spark-dev", "spark-prod"]

    @pytest.mark.asyncio
    async def test_default_ascending_is_creation_order(self, catalog):
        result = await catalog.get_applications(descending=False)

        assert ids(result) == ["spark-prod", "spark-dev", "hadoop", "hive", "sparkling"]

    @pytest.mark.asyncio
    async def test_multiple_keys(self, catalog):
        result = await catalog.get_applications(descending=False, order_bys=["user", "name", "id"])

        assert ids(result) == ["spark-dev", "hadoop", "spark-prod", "sparkling", "hive"]

    @pytest.mark.asyncio
    async def test_descending_applies_to_all_keys(self, catalog):
        result = await catalog.get_applications(descending=True, order_bys=["user", "name"])

        assert ids(result) == ["hive", "sparkling", "spark-prod", "hadoop", "spark-dev"]

    @pytest.mark.asyncio
    async def test_unknown_sort_field(self, catalog):
        with pytest.raises(ValidationError) as exc_info:
            await catalog.get_applications(order_bys=["colour"])

        assert exc_info.value.details["field"] == "order_bys"


class TestPaging:

    @pytest.mark.asyncio
    async def test_pages_partition_results(self, catalog):
        pages = [
            ids(await catalog.get_applications(page=page, limit=2, order_bys=["name"]))
            for page in range(3)
        ]
        everything = ids(await catalog.get_applications(order_bys=["name"]))

        assert [len(page) for page in pages] == [2, 2, 1]
        assert pages[0] + pages[1] + pages[2] == everything

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, catalog):
        assert await catalog.get_applications(page=10, limit=2) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(-1, 10), (0, 0), (0, -5)])
    async def test_invalid_paging(self, catalog, page, limit):
        with pytest.raises(ValidationError):
            await catalog.get_applications(page=page, limit=limit)


class TestEngineHelpers:

    def test_resolve_order_bys_first_occurrence_wins(self):
        resolved = ApplicationQueryEngine.resolve_order_bys(
            ("updated", "name", "updated_at", "userName", "user")
        )

        assert resolved == ("updated_at", "name", "user")

    def test_resolve_order_bys_default(self):
        assert ApplicationQueryEngine.resolve_order_bys(()) == ("created_at",)

    def test_predicate_name_wildcard_is_literal_otherwise(self):
        predicate = ApplicationQueryEngine.build_predicate(ApplicationQuery(name="a.b%"))

        assert predicate(Application(name="a.bc", user="u"))
        assert not predicate(Application(name="axbc", user="u"))

    def test_sort_puts_missing_values_last(self):
        apps = [
            Application(id="1", name="x", user="u", version=None),
            Application(id="2", name="x", user="u", version="1.0"),
        ]

        result = ApplicationQueryEngine.sort(apps, ("version",), descending=False)

        assert [app.id for app in result] == ["2", "1"]


class TestCriteriaShape:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("criteria,field", [
        ({"tags": "prod"}, "tags"),
        ({"statuses": "ACTIVE"}, "statuses"),
        ({"order_bys": "name"}, "order_bys"),
        ({"tags": 42}, "tags"),
    ])
    async def test_non_collection_criteria_are_rejected(self, catalog, criteria, field):
        with pytest.raises(ValidationError) as exc_info:
            await catalog.get_applications(**criteria)

        assert exc_info.value.details["field"] == field

    @pytest.mark.asyncio
    async def test_single_tag_in_a_list_matches(self, catalog):
        result = await catalog.get_applications(tags=["hadoop"])

        assert ids(result) == ["hadoop"]

    @pytest.mark.asyncio
    async def test_generator_criteria_are_accepted(self, catalog):
        result = await catalog.get_applications(
            tags=(tag for tag in ["prod", "beta"]),
            order_bys=(field for field in ["name"]),
        )

        assert ids(result) == ["sparkling"]
