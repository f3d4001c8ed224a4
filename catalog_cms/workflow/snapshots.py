"""Entity snapshot serializers.

Project live categories and collections into plain, JSON-safe dicts
holding only the fields that matter for approval diffs.
"""

from datetime import datetime
from typing import Any

from catalog_cms.domain.entities import Category, Collection
from catalog_cms.workflow.value_per_point import normalize_value_per_points

CATEGORY_DIFF_FIELDS = (
    "name",
    "slug",
    "description",
    "visibility",
    "sort_rank",
    "workflow_status",
    "value_per_points",
)

COLLECTION_DIFF_FIELDS = (
    "name",
    "slug",
    "tagline",
    "description",
    "visibility",
    "sort_rank",
    "scheduled_start",
    "scheduled_end",
    "workflow_status",
    "value_per_points",
)


def _text(value: Any) -> Any:
    return value or None


def _rank(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _timestamp(value: datetime | str | None) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value or None


def _status(value: Any) -> str | None:
    return getattr(value, "value", value) or None


def serialize_category(entity: Category | None) -> dict[str, Any] | None:
    """Snapshot a category; None means the category did not exist."""
    if entity is None:
        return None

    return {
        "id": entity.id,
        "name": _text(entity.name),
        "slug": _text(entity.slug),
        "description": _text(entity.description),
        "visibility": _text(entity.visibility),
        "sort_rank": _rank(entity.sort_rank),
        "workflow_status": _status(entity.workflow_status),
        "value_per_points": normalize_value_per_points(entity.value_per_points),
    }


def serialize_collection(entity: Collection | None) -> dict[str, Any] | None:
    """Snapshot a collection; None means the collection did not exist.

    Related categories are reduced to ``{id, name, slug}`` stubs.
    """
    if entity is None:
        return None

    categories = [
        {"id": item.id, "name": item.name, "slug": item.slug}
        for item in entity.categories or []
    ]

    return {
        "id": entity.id,
        "name": _text(entity.name),
        "slug": _text(entity.slug),
        "tagline": _text(entity.tagline),
        "description": _text(entity.description),
        "visibility": _text(entity.visibility),
        "sort_rank": _rank(entity.sort_rank),
        "scheduled_start": _timestamp(entity.scheduled_start),
        "scheduled_end": _timestamp(entity.scheduled_end),
        "workflow_status": _status(entity.workflow_status),
        "categories": categories,
        "value_per_points": normalize_value_per_points(entity.value_per_points),
    }
