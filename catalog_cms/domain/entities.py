"""Domain entities for the catalog and its approval workflow.

Entities are plain dataclasses materialized by the catalog store with
their relations populated. They are detached copies: mutating one never
changes stored state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from catalog_cms.domain.state_machines import (
    ApprovalTaskStatus,
    SyncStatus,
    TaskPriority,
    Visibility,
    WorkflowStatus,
)


class ResourceKind(str, Enum):
    """Kinds of records held by the catalog store."""

    CATEGORY = "category"
    COLLECTION = "collection"
    APPROVAL_TASK = "approval_task"
    CURRENCY = "currency"
    SALES_CHANNEL = "sales_channel"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. "Approval task"."""
        return self.value.replace("_", " ").capitalize()


# ============================================================================
# Reference Data
# ============================================================================


@dataclass
class Currency:
    """Currency a value-per-point override is expressed in."""

    id: int
    code: str
    name: str | None = None
    symbol: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class SalesChannel:
    """Storefront sales channel."""

    id: int
    name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ValuePerPoint:
    """Monetary value of one reward point for a currency and sales channel.

    ``vpp`` is kept raw (number, numeric string or Decimal) exactly as
    stored; normalization happens in the workflow layer.
    """

    currency: Currency | None
    sales_channel: SalesChannel | None
    vpp: Any = None


# ============================================================================
# Catalog Entities
# ============================================================================


@dataclass
class Category:
    """Workflow-gated catalog category."""

    id: int
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    visibility: str | None = Visibility.PUBLIC.value
    sort_rank: int | None = None
    parent_id: int | None = None
    workflow_status: str = WorkflowStatus.READY_FOR_REVIEW.value
    sync_status: str = SyncStatus.NOT_SYNCED.value
    sync_error: str | None = None
    value_per_points: list[ValuePerPoint] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Collection:
    """Workflow-gated catalog collection grouping categories."""

    id: int
    name: str | None = None
    slug: str | None = None
    tagline: str | None = None
    description: str | None = None
    visibility: str | None = Visibility.PUBLIC.value
    sort_rank: int | None = None
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    workflow_status: str = WorkflowStatus.READY_FOR_REVIEW.value
    sync_status: str = SyncStatus.NOT_SYNCED.value
    sync_error: str | None = None
    categories: list[Category] = field(default_factory=list)
    value_per_points: list[ValuePerPoint] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================================================
# Approval Task
# ============================================================================


@dataclass
class ApprovalTask:
    """One pending or decided human review of an entity diff.

    ``state_before``/``state_after`` are immutable snapshots taken when
    the task was opened. ``category``/``collection`` are the live
    back-references resolved when the task is loaded.
    """

    id: int
    title: str
    entity_type: str
    entity_id: str
    workflow_status: str = ApprovalTaskStatus.PENDING.value
    priority: str = TaskPriority.MEDIUM.value
    entity_preview: str | None = None
    summary: str | None = None
    notes: str | None = None
    diff: dict[str, Any] = field(default_factory=dict)
    state_before: dict[str, Any] | None = None
    state_after: dict[str, Any] | None = None
    context_snapshot: dict[str, Any] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    decision_at: datetime | None = None
    category_id: int | None = None
    collection_id: int | None = None
    category: Category | None = None
    collection: Collection | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
