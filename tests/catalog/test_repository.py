"""Tests for the SQLAlchemy catalog store with a mocked session."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_cms.catalog.models import (
    CategoryModel,
    CollectionModel,
    CurrencyModel,
    SalesChannelModel,
    ValuePerPointModel,
)
from catalog_cms.catalog.repository import SqlAlchemyCatalogStore
from catalog_cms.domain.entities import ResourceKind
from catalog_cms.domain.exceptions import (
    CyclicReferenceError,
    DuplicateSlugError,
    InvalidReferenceError,
)


def make_session(rows=None, scalars=None, first=None) -> MagicMock:
    """Create a session whose get() reads from a {(model, id): row} map."""
    rows = rows or {}
    session = MagicMock()
    session.get = AsyncMock(side_effect=lambda model, key: rows.get((model, key)))

    result = MagicMock()
    result.scalars.return_value.all.return_value = scalars or []
    result.first.return_value = first
    session.execute = AsyncMock(return_value=result)
    session.commit = AsyncMock()
    return session


@pytest.fixture
def sql_store() -> SqlAlchemyCatalogStore:
    """Create a store whose session factory is never used directly."""
    return SqlAlchemyCatalogStore(session_factory=MagicMock())


# ============================================================================
# Test: Value-Per-Point Overrides
# ============================================================================


class TestValuePerPoints:
    """Tests for override rows built on write."""

    @pytest.mark.asyncio
    async def test_rows_built_from_references(self, sql_store):
        """Test overrides become rows keyed by currency and channel ids."""
        session = make_session(
            rows={
                (CurrencyModel, 1): CurrencyModel(id=1, code="USD"),
                (SalesChannelModel, 2): SalesChannelModel(id=2, name="Web"),
            }
        )
        model = CategoryModel()

        await sql_store._apply(
            session,
            ResourceKind.CATEGORY,
            model,
            {
                "name": "Shoes",
                "value_per_points": [{"currency": 1, "sales_channel": 2, "vpp": "0.5"}],
            },
            entity_id=None,
        )

        assert model.name == "Shoes"
        assert len(model.value_per_points) == 1
        row = model.value_per_points[0]
        assert (row.currency_id, row.sales_channel_id, row.vpp) == (1, 2, "0.5")
        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_currency(self, sql_store):
        """Test an override naming a missing currency is rejected."""
        session = make_session(rows={(SalesChannelModel, 2): SalesChannelModel(id=2)})

        with pytest.raises(InvalidReferenceError) as exc_info:
            await sql_store._apply(
                session,
                ResourceKind.COLLECTION,
                CollectionModel(),
                {"value_per_points": [{"currency": 9, "sales_channel": 2, "vpp": 1}]},
                entity_id=None,
            )

        assert exc_info.value.details == {
            "kind": "collection",
            "field": "value_per_points.currency",
            "reference_id": 9,
        }

    @pytest.mark.asyncio
    async def test_missing_sales_channel(self, sql_store):
        """Test an override naming a missing sales channel is rejected."""
        session = make_session(rows={(CurrencyModel, 1): CurrencyModel(id=1, code="USD")})

        with pytest.raises(InvalidReferenceError) as exc_info:
            await sql_store._apply(
                session,
                ResourceKind.CATEGORY,
                CategoryModel(),
                {"value_per_points": [{"currency": 1, "sales_channel": 4, "vpp": 1}]},
                entity_id=None,
            )

        assert exc_info.value.details["field"] == "value_per_points.sales_channel"


# ============================================================================
# Test: Collection Categories
# ============================================================================


class TestCollectionCategories:
    """Tests for the collection/category link on write."""

    @pytest.mark.asyncio
    async def test_order_kept_and_deduplicated(self, sql_store):
        """Test linked categories keep the written order without repeats."""
        first = CategoryModel(id=1, name="A", slug="a")
        second = CategoryModel(id=2, name="B", slug="b")
        session = make_session(scalars=[first, second])
        model = CollectionModel()

        await sql_store._apply(
            session,
            ResourceKind.COLLECTION,
            model,
            {"categories": [2, 1, 2]},
            entity_id=None,
        )

        assert list(model.categories) == [second, first]

    @pytest.mark.asyncio
    async def test_empty_clears_without_query(self, sql_store):
        """Test an empty category list clears the link."""
        session = make_session()
        model = CollectionModel()

        await sql_store._apply(
            session, ResourceKind.COLLECTION, model, {"categories": None}, entity_id=None
        )

        assert list(model.categories) == []
        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_category(self, sql_store):
        """Test linking a missing category is rejected."""
        session = make_session(scalars=[CategoryModel(id=1, name="A", slug="a")])

        with pytest.raises(InvalidReferenceError) as exc_info:
            await sql_store._apply(
                session,
                ResourceKind.COLLECTION,
                CollectionModel(),
                {"categories": [1, 7]},
                entity_id=None,
            )

        assert exc_info.value.details["field"] == "categories"
        assert exc_info.value.details["reference_id"] == 7


# ============================================================================
# Test: Slugs and Parents
# ============================================================================


class TestCategoryChecks:
    """Tests for slug and parent checks on write."""

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, sql_store):
        """Test a slug held by another row is a conflict."""
        session = make_session(first=(5,))

        with pytest.raises(DuplicateSlugError):
            await sql_store._apply(
                session,
                ResourceKind.CATEGORY,
                CategoryModel(),
                {"name": "Shoes", "slug": "shoes"},
                entity_id=None,
            )

    @pytest.mark.asyncio
    async def test_own_parent(self, sql_store):
        """Test a category cannot become its own parent."""
        model = CategoryModel(id=1, name="Root")
        session = make_session(rows={(CategoryModel, 1): model})

        with pytest.raises(CyclicReferenceError):
            await sql_store._apply(
                session, ResourceKind.CATEGORY, model, {"parent_id": 1}, entity_id=1
            )

        assert model.parent_id is None

    @pytest.mark.asyncio
    async def test_descendant_parent(self, sql_store):
        """Test a category cannot move under one of its descendants."""
        root = CategoryModel(id=1, name="Root")
        middle = CategoryModel(id=2, name="Middle", parent_id=1)
        leaf = CategoryModel(id=3, name="Leaf", parent_id=2)
        session = make_session(
            rows={(CategoryModel, 1): root, (CategoryModel, 2): middle, (CategoryModel, 3): leaf}
        )

        with pytest.raises(CyclicReferenceError) as exc_info:
            await sql_store._apply(
                session, ResourceKind.CATEGORY, root, {"parent_id": 3}, entity_id=1
            )

        assert exc_info.value.details["reference_id"] == 3

    @pytest.mark.asyncio
    async def test_unrelated_parent(self, sql_store):
        """Test moving under an unrelated branch is allowed."""
        left = CategoryModel(id=2, name="Left", parent_id=1)
        right = CategoryModel(id=3, name="Right", parent_id=1)
        session = make_session(
            rows={
                (CategoryModel, 1): CategoryModel(id=1, name="Root"),
                (CategoryModel, 2): left,
                (CategoryModel, 3): right,
            }
        )

        await sql_store._apply(session, ResourceKind.CATEGORY, left, {"parent_id": 3}, entity_id=2)

        assert left.parent_id == 3


# ============================================================================
# Test: Reads
# ============================================================================


class TestReads:
    """Tests for model to entity conversion on read."""

    @pytest.mark.asyncio
    async def test_get_populates_overrides(self):
        """Test a read resolves override currencies and channels."""
        model = CategoryModel(
            id=4,
            name="Shoes",
            slug="shoes",
            workflow_status="approved",
            sync_status="synced",
            value_per_points=[
                ValuePerPointModel(
                    currency=CurrencyModel(id=1, code="USD"),
                    sales_channel=SalesChannelModel(id=2, name="Web"),
                    vpp=Decimal("0.25"),
                )
            ],
        )
        session = make_session(rows={(CategoryModel, 4): model})
        factory = MagicMock()
        factory.return_value.__aenter__.return_value = session
        store = SqlAlchemyCatalogStore(session_factory=factory)

        category = await store.get(ResourceKind.CATEGORY, 4)

        assert category.slug == "shoes"
        entry = category.value_per_points[0]
        assert entry.currency.code == "USD"
        assert entry.sales_channel.name == "Web"
        assert entry.vpp == Decimal("0.25")
        assert await store.get(ResourceKind.CATEGORY, 5) is None
