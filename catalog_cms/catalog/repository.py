"""SQLAlchemy catalog store.

Database-backed implementation of the catalog store protocol. Every
operation runs in its own session and commits before returning, so
after-write hooks always observe committed state.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_cms.catalog.models import (
    ApprovalTaskModel,
    CategoryModel,
    CollectionModel,
    CurrencyModel,
    SalesChannelModel,
    ValuePerPointModel,
    collection_categories,
)
from catalog_cms.catalog.store import (
    HIERARCHY_FIELDS,
    REFERENCE_FIELDS,
    SLUGGED_KINDS,
    validate_write,
    value_per_point_rows,
)
from catalog_cms.domain.entities import (
    ApprovalTask,
    Category,
    Collection,
    Currency,
    ResourceKind,
    SalesChannel,
    ValuePerPoint,
)
from catalog_cms.domain.exceptions import (
    CyclicReferenceError,
    DuplicateSlugError,
    InvalidReferenceError,
)
from catalog_cms.infrastructure.database import get_session_factory

logger = structlog.get_logger()

MODELS: dict[ResourceKind, type] = {
    ResourceKind.CATEGORY: CategoryModel,
    ResourceKind.COLLECTION: CollectionModel,
    ResourceKind.APPROVAL_TASK: ApprovalTaskModel,
    ResourceKind.CURRENCY: CurrencyModel,
    ResourceKind.SALES_CHANNEL: SalesChannelModel,
}

# Entity field name -> model attribute name where they differ
ATTRIBUTE_NAMES = {"metadata": "metadata_"}


# ============================================================================
# Model -> Entity Conversion
# ============================================================================


def _currency(model: CurrencyModel) -> Currency:
    return Currency(
        id=model.id,
        code=model.code,
        name=model.name,
        symbol=model.symbol,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _sales_channel(model: SalesChannelModel) -> SalesChannel:
    return SalesChannel(
        id=model.id,
        name=model.name,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _value_per_points(models: list[ValuePerPointModel]) -> list[ValuePerPoint]:
    return [
        ValuePerPoint(
            currency=_currency(item.currency) if item.currency else None,
            sales_channel=_sales_channel(item.sales_channel) if item.sales_channel else None,
            vpp=item.vpp,
        )
        for item in models
    ]


def _category(model: CategoryModel) -> Category:
    return Category(
        id=model.id,
        name=model.name,
        slug=model.slug,
        description=model.description,
        visibility=model.visibility,
        sort_rank=model.sort_rank,
        parent_id=model.parent_id,
        workflow_status=model.workflow_status,
        sync_status=model.sync_status,
        sync_error=model.sync_error,
        value_per_points=_value_per_points(model.value_per_points),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _collection(model: CollectionModel) -> Collection:
    return Collection(
        id=model.id,
        name=model.name,
        slug=model.slug,
        tagline=model.tagline,
        description=model.description,
        visibility=model.visibility,
        sort_rank=model.sort_rank,
        scheduled_start=model.scheduled_start,
        scheduled_end=model.scheduled_end,
        workflow_status=model.workflow_status,
        sync_status=model.sync_status,
        sync_error=model.sync_error,
        categories=[_category(item) for item in model.categories],
        value_per_points=_value_per_points(model.value_per_points),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _approval_task(model: ApprovalTaskModel) -> ApprovalTask:
    return ApprovalTask(
        id=model.id,
        title=model.title,
        entity_type=model.entity_type,
        entity_id=model.entity_id,
        workflow_status=model.workflow_status,
        priority=model.priority,
        entity_preview=model.entity_preview,
        summary=model.summary,
        notes=model.notes,
        diff=model.diff or {},
        state_before=model.state_before,
        state_after=model.state_after,
        context_snapshot=model.context_snapshot,
        metadata=model.metadata_ or {},
        decision_at=model.decision_at,
        category_id=model.category_id,
        collection_id=model.collection_id,
        category=_category(model.category) if model.category else None,
        collection=_collection(model.collection) if model.collection else None,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


CONVERTERS: dict[ResourceKind, Callable[[Any], Any]] = {
    ResourceKind.CATEGORY: _category,
    ResourceKind.COLLECTION: _collection,
    ResourceKind.APPROVAL_TASK: _approval_task,
    ResourceKind.CURRENCY: _currency,
    ResourceKind.SALES_CHANNEL: _sales_channel,
}


# ============================================================================
# Store
# ============================================================================


class SqlAlchemyCatalogStore:
    """Catalog store over PostgreSQL.

    Example usage:
        store = SqlAlchemyCatalogStore()
        category = await store.insert(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
    """

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        """Initialize store.

        Args:
            session_factory: Session factory (defaults to the configured engine).
        """
        self._session_factory = session_factory or get_session_factory()

    async def get(self, kind: ResourceKind, entity_id: int) -> Any | None:
        """Get a record by id with relations populated."""
        async with self._session_factory() as session:
            model = await session.get(MODELS[kind], entity_id)
            if model is None:
                return None
            return CONVERTERS[kind](model)

    async def list_all(self, kind: ResourceKind) -> list[Any]:
        """List all records of a kind ordered by id."""
        model_class = MODELS[kind]
        async with self._session_factory() as session:
            result = await session.execute(select(model_class).order_by(model_class.id))
            return [CONVERTERS[kind](model) for model in result.scalars().all()]

    async def insert(self, kind: ResourceKind, data: dict[str, Any]) -> Any:
        """Insert a record.

        Raises:
            UnknownFieldError: On unknown fields.
            MissingFieldError: On missing required fields.
            DuplicateSlugError: If the slug is taken.
            InvalidReferenceError: If a relation points nowhere.
        """
        validate_write(kind, data, creating=True)

        async with self._session_factory() as session:
            model = MODELS[kind]()
            await self._apply(session, kind, model, data, entity_id=None)
            session.add(model)
            await session.commit()
            entity_id = model.id

        logger.debug("Record inserted", kind=kind.value, entity_id=entity_id)
        return await self.get(kind, entity_id)

    async def update(
        self, kind: ResourceKind, entity_id: int, data: dict[str, Any]
    ) -> Any | None:
        """Apply a partial update.

        Returns:
            Updated record, or None if it does not exist.
        """
        async with self._session_factory() as session:
            model = await session.get(MODELS[kind], entity_id)
            if model is None:
                return None

            validate_write(kind, data, creating=False)
            await self._apply(session, kind, model, data, entity_id=entity_id)
            model.updated_at = datetime.now(timezone.utc)
            await session.commit()

        logger.debug("Record updated", kind=kind.value, entity_id=entity_id)
        return await self.get(kind, entity_id)

    async def delete(self, kind: ResourceKind, entity_id: int) -> bool:
        """Delete a record; the database detaches rows referencing it."""
        async with self._session_factory() as session:
            model = await session.get(MODELS[kind], entity_id)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()

        logger.debug("Record deleted", kind=kind.value, entity_id=entity_id)
        return True

    async def find_collections_for_category(self, category_id: int) -> list[Collection]:
        """Collections containing a category, by sort rank then name."""
        query = (
            select(CollectionModel)
            .join(
                collection_categories,
                collection_categories.c.collection_id == CollectionModel.id,
            )
            .where(collection_categories.c.category_id == category_id)
            .order_by(
                CollectionModel.sort_rank.asc().nulls_last(),
                CollectionModel.name.asc(),
            )
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_collection(model) for model in result.scalars().all()]

    async def find_child_categories(self, parent_id: int) -> list[Category]:
        """Direct children of a category ordered by id."""
        query = (
            select(CategoryModel)
            .where(CategoryModel.parent_id == parent_id)
            .order_by(CategoryModel.id)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_category(model) for model in result.scalars().all()]

    # ------------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------------

    async def _apply(
        self,
        session: AsyncSession,
        kind: ResourceKind,
        model: Any,
        data: dict[str, Any],
        entity_id: int | None,
    ) -> None:
        if kind in SLUGGED_KINDS and data.get("slug"):
            model_class = MODELS[kind]
            query = select(model_class.id).where(model_class.slug == data["slug"])
            if entity_id is not None:
                query = query.where(model_class.id != entity_id)
            if (await session.execute(query)).first() is not None:
                raise DuplicateSlugError(kind.value, data["slug"])

        for field_name, target in REFERENCE_FIELDS.get(kind, {}).items():
            reference_id = data.get(field_name)
            if reference_id is not None and await session.get(MODELS[target], reference_id) is None:
                raise InvalidReferenceError(kind.value, field_name, reference_id)

        parent_field = HIERARCHY_FIELDS.get(kind)
        if parent_field and entity_id is not None and data.get(parent_field) is not None:
            await self._check_ancestry(session, kind, parent_field, entity_id, data[parent_field])

        for field_name, value in data.items():
            if field_name == "categories":
                model.categories = await self._load_categories(session, kind, value)
            elif field_name == "value_per_points":
                model.value_per_points = await self._build_value_per_points(
                    session, kind, value
                )
            else:
                setattr(model, ATTRIBUTE_NAMES.get(field_name, field_name), value)

    async def _check_ancestry(
        self,
        session: AsyncSession,
        kind: ResourceKind,
        parent_field: str,
        entity_id: int,
        parent_id: int,
    ) -> None:
        seen: set[int] = set()
        current = parent_id
        while current is not None and current not in seen:
            if current == entity_id:
                raise CyclicReferenceError(kind.value, parent_field, parent_id)
            seen.add(current)
            ancestor = await session.get(MODELS[kind], current)
            current = getattr(ancestor, parent_field) if ancestor is not None else None

    async def _load_categories(
        self, session: AsyncSession, kind: ResourceKind, category_ids: list[int] | None
    ) -> list[CategoryModel]:
        category_ids = list(dict.fromkeys(category_ids or []))
        if not category_ids:
            return []

        result = await session.execute(
            select(CategoryModel).where(CategoryModel.id.in_(category_ids))
        )
        found = {model.id: model for model in result.scalars().all()}
        for category_id in category_ids:
            if category_id not in found:
                raise InvalidReferenceError(kind.value, "categories", category_id)
        return [found[category_id] for category_id in category_ids]

    async def _build_value_per_points(
        self, session: AsyncSession, kind: ResourceKind, entries: list[Any] | None
    ) -> list[ValuePerPointModel]:
        models = []
        for row in value_per_point_rows(entries):
            currency_id = row["currency"]
            sales_channel_id = row["sales_channel"]
            if currency_id is not None and await session.get(CurrencyModel, currency_id) is None:
                raise InvalidReferenceError(kind.value, "value_per_points.currency", currency_id)
            if (
                sales_channel_id is not None
                and await session.get(SalesChannelModel, sales_channel_id) is None
            ):
                raise InvalidReferenceError(
                    kind.value, "value_per_points.sales_channel", sales_channel_id
                )
            models.append(
                ValuePerPointModel(
                    currency_id=currency_id,
                    sales_channel_id=sales_channel_id,
                    vpp=row["vpp"],
                )
            )
        return models
