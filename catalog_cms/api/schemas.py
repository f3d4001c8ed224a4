"""API schemas for the catalog CMS.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from catalog_cms.domain.state_machines import (
    ApprovalTaskStatus,
    SyncStatus,
    TaskPriority,
    Visibility,
    WorkflowStatus,
)


# ============================================================================
# Common Schemas
# ============================================================================


class EntityType(str, Enum):
    """Entity types an approval task can review."""

    CATEGORY = "category"
    COLLECTION = "collection"


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class WriteRequest(BaseModel):
    """Base for write payloads; enums are dumped as plain values."""

    model_config = ConfigDict(use_enum_values=True, extra="forbid")


# ============================================================================
# Reference Data Schemas
# ============================================================================


class CurrencyCreateRequest(WriteRequest):
    """Request to create a currency."""

    code: str = Field(..., min_length=1, max_length=10, description="ISO currency code")
    name: str | None = Field(default=None, max_length=100)
    symbol: str | None = Field(default=None, max_length=10)


class CurrencyResponse(BaseModel):
    """Currency response."""

    id: int
    code: str
    name: str | None = None
    symbol: str | None = None


class SalesChannelCreateRequest(WriteRequest):
    """Request to create a sales channel."""

    name: str = Field(..., min_length=1, max_length=255)


class SalesChannelResponse(BaseModel):
    """Sales channel response."""

    id: int
    name: str | None = None


class CurrencyListResponse(BaseModel):
    items: list[CurrencyResponse]
    total: int


class SalesChannelListResponse(BaseModel):
    items: list[SalesChannelResponse]
    total: int


# ============================================================================
# Value-Per-Point Schemas
# ============================================================================


class ValuePerPointInput(WriteRequest):
    """Value-per-point override on a write."""

    currency: int = Field(..., description="Currency ID")
    sales_channel: int = Field(..., description="Sales channel ID")
    vpp: Decimal = Field(..., ge=0, description="Value of one point")


class ValuePerPointSchema(BaseModel):
    """Value-per-point override as stored."""

    currency: CurrencyResponse | None = None
    sales_channel: SalesChannelResponse | None = None
    vpp: float | None = None


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(WriteRequest):
    """Request to create a category.

    Workflow and sync status are managed by the approval workflow and
    cannot be written directly.
    """

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    description: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    sort_rank: int | None = None
    parent_id: int | None = None
    value_per_points: list[ValuePerPointInput] = Field(default_factory=list)


class CategoryUpdateRequest(WriteRequest):
    """Partial category update."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    description: str | None = None
    visibility: Visibility | None = None
    sort_rank: int | None = None
    parent_id: int | None = None
    value_per_points: list[ValuePerPointInput] | None = None


class CategorySummary(BaseModel):
    """Category reference inside a collection or category tree."""

    id: int
    name: str | None = None
    slug: str | None = None


class CollectionSummary(BaseModel):
    """Collection reference inside a category."""

    id: int
    name: str | None = None
    slug: str | None = None
    sort_rank: int | None = None


class ApprovalTaskSummary(BaseModel):
    """Approval task reference inside a collection."""

    id: int
    title: str
    workflow_status: ApprovalTaskStatus
    priority: TaskPriority
    decision_at: datetime | None = None


class CategoryResponse(BaseModel):
    """Category response."""

    id: int
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    visibility: str | None = None
    sort_rank: int | None = None
    parent_id: int | None = None
    workflow_status: WorkflowStatus
    sync_status: SyncStatus
    sync_error: str | None = None
    value_per_points: list[ValuePerPointSchema] = Field(default_factory=list)
    children: list[CategorySummary] = Field(default_factory=list)
    collections: list[CollectionSummary] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryListResponse(BaseModel):
    items: list[CategoryResponse]
    total: int


# ============================================================================
# Collection Schemas
# ============================================================================


class CollectionCreateRequest(WriteRequest):
    """Request to create a collection."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    tagline: str | None = Field(default=None, max_length=255)
    description: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    sort_rank: int | None = None
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    categories: list[int] = Field(default_factory=list, description="Category IDs")
    value_per_points: list[ValuePerPointInput] = Field(default_factory=list)


class CollectionUpdateRequest(WriteRequest):
    """Partial collection update."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    tagline: str | None = Field(default=None, max_length=255)
    description: str | None = None
    visibility: Visibility | None = None
    sort_rank: int | None = None
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    categories: list[int] | None = None
    value_per_points: list[ValuePerPointInput] | None = None


class CollectionResponse(BaseModel):
    """Collection response."""

    id: int
    name: str | None = None
    slug: str | None = None
    tagline: str | None = None
    description: str | None = None
    visibility: str | None = None
    sort_rank: int | None = None
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    workflow_status: WorkflowStatus
    sync_status: SyncStatus
    sync_error: str | None = None
    categories: list[CategorySummary] = Field(default_factory=list)
    value_per_points: list[ValuePerPointSchema] = Field(default_factory=list)
    approval_tasks: list[ApprovalTaskSummary] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CollectionListResponse(BaseModel):
    items: list[CollectionResponse]
    total: int


# ============================================================================
# Sync Schemas
# ============================================================================


class SyncResultResponse(BaseModel):
    """Outcome of a manual sync."""

    ok: bool
    status: str | None = None
    reason: str | None = None
    error: str | None = None


# ============================================================================
# Approval Task Schemas
# ============================================================================


class ApprovalTaskCreateRequest(WriteRequest):
    """Request to open an approval task by hand."""

    title: str = Field(..., min_length=1, max_length=255)
    entity_type: EntityType
    entity_id: str = Field(..., min_length=1)
    priority: TaskPriority = TaskPriority.MEDIUM
    summary: str | None = None
    notes: str | None = None
    category_id: int | None = None
    collection_id: int | None = None


class ApprovalTaskUpdateRequest(WriteRequest):
    """Decision or edit of an approval task."""

    workflow_status: ApprovalTaskStatus | None = None
    priority: TaskPriority | None = None
    notes: str | None = None
    decision_at: datetime | None = None


class ApprovalTaskResponse(BaseModel):
    """Approval task response."""

    id: int
    title: str
    entity_type: str
    entity_id: str
    workflow_status: ApprovalTaskStatus
    priority: TaskPriority
    entity_preview: str | None = None
    summary: str | None = None
    notes: str | None = None
    diff: dict[str, Any] = Field(default_factory=dict)
    state_before: dict[str, Any] | None = None
    state_after: dict[str, Any] | None = None
    context_snapshot: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    decision_at: datetime | None = None
    category_id: int | None = None
    collection_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApprovalTaskListResponse(BaseModel):
    items: list[ApprovalTaskResponse]
    total: int
