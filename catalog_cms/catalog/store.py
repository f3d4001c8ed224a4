"""Catalog store.

The storage collaborator of the workflow engine: CRUD by resource kind
with relations populated on read. Two implementations exist, the
in-memory store below (default backend, used by tests) and the
SQLAlchemy store in ``catalog_cms.catalog.repository``.
"""

import copy
from datetime import datetime, timezone
from typing import Any, Protocol

import structlog

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
    MissingFieldError,
    UnknownFieldError,
)
from catalog_cms.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Field Definitions
# ============================================================================


SCALAR_FIELDS: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.CATEGORY: frozenset(
        {
            "name",
            "slug",
            "description",
            "visibility",
            "sort_rank",
            "parent_id",
            "workflow_status",
            "sync_status",
            "sync_error",
        }
    ),
    ResourceKind.COLLECTION: frozenset(
        {
            "name",
            "slug",
            "tagline",
            "description",
            "visibility",
            "sort_rank",
            "scheduled_start",
            "scheduled_end",
            "workflow_status",
            "sync_status",
            "sync_error",
        }
    ),
    ResourceKind.APPROVAL_TASK: frozenset(
        {
            "title",
            "entity_type",
            "entity_id",
            "workflow_status",
            "priority",
            "entity_preview",
            "summary",
            "notes",
            "diff",
            "state_before",
            "state_after",
            "context_snapshot",
            "metadata",
            "decision_at",
            "category_id",
            "collection_id",
        }
    ),
    ResourceKind.CURRENCY: frozenset({"code", "name", "symbol"}),
    ResourceKind.SALES_CHANNEL: frozenset({"name"}),
}

RELATION_FIELDS: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.CATEGORY: frozenset({"value_per_points"}),
    ResourceKind.COLLECTION: frozenset({"categories", "value_per_points"}),
}

REQUIRED_FIELDS: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.CURRENCY: frozenset({"code"}),
    ResourceKind.APPROVAL_TASK: frozenset({"title", "entity_type", "entity_id"}),
}

# Foreign keys held as plain id columns
REFERENCE_FIELDS: dict[ResourceKind, dict[str, ResourceKind]] = {
    ResourceKind.CATEGORY: {"parent_id": ResourceKind.CATEGORY},
    ResourceKind.APPROVAL_TASK: {
        "category_id": ResourceKind.CATEGORY,
        "collection_id": ResourceKind.COLLECTION,
    },
}

# Self-references forming a tree; a record may not become its own ancestor
HIERARCHY_FIELDS: dict[ResourceKind, str] = {ResourceKind.CATEGORY: "parent_id"}

SLUGGED_KINDS = frozenset({ResourceKind.CATEGORY, ResourceKind.COLLECTION})


def validate_write(kind: ResourceKind, data: dict[str, Any], creating: bool) -> None:
    """Check field names (and required fields on create).

    Raises:
        UnknownFieldError: If data carries fields the kind does not have.
        MissingFieldError: If a create lacks required fields.
    """
    allowed = SCALAR_FIELDS[kind] | RELATION_FIELDS.get(kind, frozenset())
    unknown = [name for name in data if name not in allowed]
    if unknown:
        raise UnknownFieldError(kind.value, unknown)

    if creating:
        missing = [
            name
            for name in REQUIRED_FIELDS.get(kind, frozenset())
            if data.get(name) in (None, "")
        ]
        if missing:
            raise MissingFieldError(kind.value, missing)


def value_per_point_rows(entries: list[Any] | None) -> list[dict[str, Any]]:
    """Convert written value-per-point entries to storage rows.

    Entries are mappings with ``currency`` and ``sales_channel`` ids and
    a raw ``vpp`` value.
    """
    rows = []
    for entry in entries or []:
        rows.append(
            {
                "currency": entry.get("currency"),
                "sales_channel": entry.get("sales_channel"),
                "vpp": entry.get("vpp"),
            }
        )
    return rows


# ============================================================================
# Store Protocol
# ============================================================================


class CatalogStore(Protocol):
    """Storage interface consumed by the workflow engine."""

    async def get(self, kind: ResourceKind, entity_id: int) -> Any | None: ...

    async def list_all(self, kind: ResourceKind) -> list[Any]: ...

    async def insert(self, kind: ResourceKind, data: dict[str, Any]) -> Any: ...

    async def update(
        self, kind: ResourceKind, entity_id: int, data: dict[str, Any]
    ) -> Any | None: ...

    async def delete(self, kind: ResourceKind, entity_id: int) -> bool: ...

    async def find_collections_for_category(self, category_id: int) -> list[Collection]: ...

    async def find_child_categories(self, parent_id: int) -> list[Category]: ...


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryCatalogStore:
    """In-memory catalog store.

    Rows are kept as plain dicts holding relation ids; every read
    materializes fresh entity objects with relations populated.
    """

    def __init__(self) -> None:
        self._rows: dict[ResourceKind, dict[int, dict[str, Any]]] = {
            kind: {} for kind in ResourceKind
        }
        self._next_id: dict[ResourceKind, int] = {kind: 1 for kind in ResourceKind}

    async def get(self, kind: ResourceKind, entity_id: int) -> Any | None:
        """Get a record by id with relations populated."""
        row = self._rows[kind].get(entity_id)
        if row is None:
            return None
        return self._materialize(kind, row)

    async def list_all(self, kind: ResourceKind) -> list[Any]:
        """List all records of a kind ordered by id."""
        return [
            self._materialize(kind, row)
            for _, row in sorted(self._rows[kind].items())
        ]

    async def insert(self, kind: ResourceKind, data: dict[str, Any]) -> Any:
        """Insert a record.

        Raises:
            UnknownFieldError: On unknown fields.
            MissingFieldError: On missing required fields.
            DuplicateSlugError: If the slug is taken.
            InvalidReferenceError: If a relation points nowhere.
        """
        validate_write(kind, data, creating=True)
        values = self._prepare(kind, data, entity_id=None)

        entity_id = self._next_id[kind]
        self._next_id[kind] += 1
        now = datetime.now(timezone.utc)
        row = {**values, "id": entity_id, "created_at": now, "updated_at": now}
        self._rows[kind][entity_id] = row

        logger.debug("Record inserted", kind=kind.value, entity_id=entity_id)
        return self._materialize(kind, row)

    async def update(
        self, kind: ResourceKind, entity_id: int, data: dict[str, Any]
    ) -> Any | None:
        """Apply a partial update.

        Returns:
            Updated record, or None if it does not exist.
        """
        row = self._rows[kind].get(entity_id)
        if row is None:
            return None

        validate_write(kind, data, creating=False)
        values = self._prepare(kind, data, entity_id=entity_id)
        row.update(values)
        row["updated_at"] = datetime.now(timezone.utc)

        logger.debug("Record updated", kind=kind.value, entity_id=entity_id)
        return self._materialize(kind, row)

    async def delete(self, kind: ResourceKind, entity_id: int) -> bool:
        """Delete a record and detach rows referencing it."""
        if self._rows[kind].pop(entity_id, None) is None:
            return False

        if kind is ResourceKind.CATEGORY:
            for collection in self._rows[ResourceKind.COLLECTION].values():
                collection["categories"] = [
                    cid for cid in collection.get("categories", []) if cid != entity_id
                ]

        for owner, references in REFERENCE_FIELDS.items():
            for field_name, target in references.items():
                if target is not kind:
                    continue
                for row in self._rows[owner].values():
                    if row.get(field_name) == entity_id:
                        row[field_name] = None

        logger.debug("Record deleted", kind=kind.value, entity_id=entity_id)
        return True

    async def find_collections_for_category(self, category_id: int) -> list[Collection]:
        """Collections containing a category, by sort rank then name."""
        rows = [
            row
            for row in self._rows[ResourceKind.COLLECTION].values()
            if category_id in row.get("categories", [])
        ]
        rows.sort(
            key=lambda row: (
                row.get("sort_rank") is None,
                row.get("sort_rank") or 0,
                row.get("name") or "",
            )
        )
        return [self._materialize(ResourceKind.COLLECTION, row) for row in rows]

    async def find_child_categories(self, parent_id: int) -> list[Category]:
        """Direct children of a category ordered by id."""
        return [
            self._materialize(ResourceKind.CATEGORY, row)
            for _, row in sorted(self._rows[ResourceKind.CATEGORY].items())
            if row.get("parent_id") == parent_id
        ]

    # ------------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------------

    def _prepare(
        self, kind: ResourceKind, data: dict[str, Any], entity_id: int | None
    ) -> dict[str, Any]:
        values = copy.deepcopy(data)

        if kind in SLUGGED_KINDS and values.get("slug"):
            for other_id, other in self._rows[kind].items():
                if other_id != entity_id and other.get("slug") == values["slug"]:
                    raise DuplicateSlugError(kind.value, values["slug"])

        for field_name, target in REFERENCE_FIELDS.get(kind, {}).items():
            reference_id = values.get(field_name)
            if reference_id is not None and reference_id not in self._rows[target]:
                raise InvalidReferenceError(kind.value, field_name, reference_id)

        parent_field = HIERARCHY_FIELDS.get(kind)
        if parent_field and entity_id is not None and values.get(parent_field) is not None:
            self._check_ancestry(kind, parent_field, entity_id, values[parent_field])

        if "categories" in values:
            category_ids = list(dict.fromkeys(values["categories"] or []))
            for category_id in category_ids:
                if category_id not in self._rows[ResourceKind.CATEGORY]:
                    raise InvalidReferenceError(kind.value, "categories", category_id)
            values["categories"] = category_ids

        if "value_per_points" in values:
            rows = value_per_point_rows(values["value_per_points"])
            for row in rows:
                if row["currency"] is not None and row["currency"] not in self._rows[ResourceKind.CURRENCY]:
                    raise InvalidReferenceError(kind.value, "value_per_points.currency", row["currency"])
                if (
                    row["sales_channel"] is not None
                    and row["sales_channel"] not in self._rows[ResourceKind.SALES_CHANNEL]
                ):
                    raise InvalidReferenceError(
                        kind.value, "value_per_points.sales_channel", row["sales_channel"]
                    )
            values["value_per_points"] = rows

        return values

    def _check_ancestry(
        self, kind: ResourceKind, parent_field: str, entity_id: int, parent_id: int
    ) -> None:
        seen: set[int] = set()
        current = parent_id
        while current is not None and current not in seen:
            if current == entity_id:
                raise CyclicReferenceError(kind.value, parent_field, parent_id)
            seen.add(current)
            row = self._rows[kind].get(current)
            current = row.get(parent_field) if row else None

    def _materialize(self, kind: ResourceKind, row: dict[str, Any]) -> Any:
        row = copy.deepcopy(row)
        if kind is ResourceKind.CATEGORY:
            row["value_per_points"] = self._value_per_points(row.get("value_per_points"))
            return Category(**row)
        if kind is ResourceKind.COLLECTION:
            row["value_per_points"] = self._value_per_points(row.get("value_per_points"))
            row["categories"] = [
                self._materialize(ResourceKind.CATEGORY, self._rows[ResourceKind.CATEGORY][cid])
                for cid in row.get("categories", [])
                if cid in self._rows[ResourceKind.CATEGORY]
            ]
            return Collection(**row)
        if kind is ResourceKind.APPROVAL_TASK:
            category_row = self._rows[ResourceKind.CATEGORY].get(row.get("category_id"))
            collection_row = self._rows[ResourceKind.COLLECTION].get(row.get("collection_id"))
            return ApprovalTask(
                **row,
                category=(
                    self._materialize(ResourceKind.CATEGORY, category_row)
                    if category_row
                    else None
                ),
                collection=(
                    self._materialize(ResourceKind.COLLECTION, collection_row)
                    if collection_row
                    else None
                ),
            )
        if kind is ResourceKind.CURRENCY:
            return Currency(**row)
        return SalesChannel(**row)

    def _value_per_points(self, rows: list[dict[str, Any]] | None) -> list[ValuePerPoint]:
        entries = []
        for row in rows or []:
            currency_row = self._rows[ResourceKind.CURRENCY].get(row.get("currency"))
            channel_row = self._rows[ResourceKind.SALES_CHANNEL].get(row.get("sales_channel"))
            entries.append(
                ValuePerPoint(
                    currency=Currency(**copy.deepcopy(currency_row)) if currency_row else None,
                    sales_channel=SalesChannel(**copy.deepcopy(channel_row)) if channel_row else None,
                    vpp=row.get("vpp"),
                )
            )
        return entries


# Global store instance
_store: CatalogStore | None = None


def get_catalog_store() -> CatalogStore:
    """Get the catalog store singleton for the configured backend."""
    global _store
    if _store is None:
        if settings.storage_backend == "database":
            from catalog_cms.catalog.repository import SqlAlchemyCatalogStore

            _store = SqlAlchemyCatalogStore()
        else:
            _store = InMemoryCatalogStore()
    return _store


def reset_catalog_store() -> None:
    """Reset catalog store (for testing)."""
    global _store
    _store = InMemoryCatalogStore()
