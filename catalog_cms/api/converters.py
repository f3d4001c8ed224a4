"""Entity to response schema converters."""

from collections.abc import Sequence

from catalog_cms.api.schemas import (
    ApprovalTaskResponse,
    ApprovalTaskSummary,
    CategoryResponse,
    CategorySummary,
    CollectionResponse,
    CollectionSummary,
    CurrencyResponse,
    SalesChannelResponse,
    ValuePerPointSchema,
)
from catalog_cms.domain.entities import (
    ApprovalTask,
    Category,
    Collection,
    Currency,
    SalesChannel,
    ValuePerPoint,
)
from catalog_cms.workflow.value_per_point import coerce_number


def currency_to_response(currency: Currency) -> CurrencyResponse:
    return CurrencyResponse(
        id=currency.id,
        code=currency.code,
        name=currency.name,
        symbol=currency.symbol,
    )


def sales_channel_to_response(channel: SalesChannel) -> SalesChannelResponse:
    return SalesChannelResponse(id=channel.id, name=channel.name)


def value_per_points_to_schema(entries: list[ValuePerPoint]) -> list[ValuePerPointSchema]:
    """Convert stored overrides, keeping their stored order."""
    return [
        ValuePerPointSchema(
            currency=currency_to_response(entry.currency) if entry.currency else None,
            sales_channel=(
                sales_channel_to_response(entry.sales_channel) if entry.sales_channel else None
            ),
            vpp=coerce_number(entry.vpp),
        )
        for entry in entries
    ]


def category_summary(category: Category) -> CategorySummary:
    return CategorySummary(id=category.id, name=category.name, slug=category.slug)


def category_to_response(
    category: Category,
    children: Sequence[Category] = (),
    collections: Sequence[Collection] = (),
) -> CategoryResponse:
    """Convert a category with its populated children and collections."""
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        visibility=category.visibility,
        sort_rank=category.sort_rank,
        parent_id=category.parent_id,
        workflow_status=category.workflow_status,
        sync_status=category.sync_status,
        sync_error=category.sync_error,
        value_per_points=value_per_points_to_schema(category.value_per_points),
        children=[category_summary(item) for item in children],
        collections=[
            CollectionSummary(id=item.id, name=item.name, slug=item.slug, sort_rank=item.sort_rank)
            for item in collections
        ],
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def collection_to_response(
    collection: Collection, approval_tasks: Sequence[ApprovalTask] = ()
) -> CollectionResponse:
    return CollectionResponse(
        id=collection.id,
        name=collection.name,
        slug=collection.slug,
        tagline=collection.tagline,
        description=collection.description,
        visibility=collection.visibility,
        sort_rank=collection.sort_rank,
        scheduled_start=collection.scheduled_start,
        scheduled_end=collection.scheduled_end,
        workflow_status=collection.workflow_status,
        sync_status=collection.sync_status,
        sync_error=collection.sync_error,
        categories=[category_summary(item) for item in collection.categories],
        value_per_points=value_per_points_to_schema(collection.value_per_points),
        approval_tasks=[
            ApprovalTaskSummary(
                id=task.id,
                title=task.title,
                workflow_status=task.workflow_status,
                priority=task.priority,
                decision_at=task.decision_at,
            )
            for task in approval_tasks
        ],
        created_at=collection.created_at,
        updated_at=collection.updated_at,
    )


def approval_task_to_response(task: ApprovalTask) -> ApprovalTaskResponse:
    return ApprovalTaskResponse(
        id=task.id,
        title=task.title,
        entity_type=task.entity_type,
        entity_id=task.entity_id,
        workflow_status=task.workflow_status,
        priority=task.priority,
        entity_preview=task.entity_preview,
        summary=task.summary,
        notes=task.notes,
        diff=task.diff or {},
        state_before=task.state_before,
        state_after=task.state_after,
        context_snapshot=task.context_snapshot,
        metadata=task.metadata or {},
        decision_at=task.decision_at,
        category_id=task.category_id,
        collection_id=task.collection_id,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )
