"""SQLAlchemy models for catalog tables.

Provides ORM models for categories, collections, value-per-point
overrides, reference data and approval tasks.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from catalog_cms.infrastructure.database import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamps() -> tuple[Column, Column]:
    return (
        Column(DateTime(timezone=True), nullable=False, default=_now),
        Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now),
    )


# ============================================================================
# Reference Data
# ============================================================================


class CurrencyModel(Base):
    """Currency used by value-per-point overrides."""

    __tablename__ = "currencies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(10), nullable=False, index=True)
    name = Column(String(100), nullable=True)
    symbol = Column(String(10), nullable=True)
    created_at, updated_at = _timestamps()


class SalesChannelModel(Base):
    """Storefront sales channel."""

    __tablename__ = "sales_channels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    created_at, updated_at = _timestamps()


# ============================================================================
# Catalog Models
# ============================================================================


collection_categories = Table(
    "collection_categories",
    Base.metadata,
    Column(
        "collection_id",
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class ValuePerPointModel(Base):
    """Value of one reward point for a currency and sales channel.

    Owned by exactly one category or one collection.
    """

    __tablename__ = "value_per_points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=True, index=True
    )
    collection_id = Column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE"), nullable=True, index=True
    )
    currency_id = Column(
        Integer, ForeignKey("currencies.id", ondelete="SET NULL"), nullable=True
    )
    sales_channel_id = Column(
        Integer, ForeignKey("sales_channels.id", ondelete="SET NULL"), nullable=True
    )
    vpp = Column(Numeric(12, 4), nullable=True)

    currency = relationship("CurrencyModel", lazy="selectin")
    sales_channel = relationship("SalesChannelModel", lazy="selectin")


class CategoryModel(Base):
    """Workflow-gated category."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    slug = Column(String(255), nullable=True, unique=True, index=True)
    description = Column(Text, nullable=True)
    visibility = Column(String(20), nullable=True, default="public")
    sort_rank = Column(Integer, nullable=True)
    parent_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    # Workflow
    workflow_status = Column(String(20), nullable=False, default="ready_for_review", index=True)
    sync_status = Column(String(20), nullable=False, default="not_synced")
    sync_error = Column(Text, nullable=True)

    created_at, updated_at = _timestamps()

    value_per_points = relationship(
        "ValuePerPointModel",
        primaryjoin="CategoryModel.id == ValuePerPointModel.category_id",
        cascade="all, delete-orphan",
        order_by="ValuePerPointModel.id",
        lazy="selectin",
    )
    collections = relationship(
        "CollectionModel",
        secondary=collection_categories,
        back_populates="categories",
        passive_deletes=True,
        lazy="noload",
    )


class CollectionModel(Base):
    """Workflow-gated collection grouping categories."""

    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    slug = Column(String(255), nullable=True, unique=True, index=True)
    tagline = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    visibility = Column(String(20), nullable=True, default="public")
    sort_rank = Column(Integer, nullable=True)
    scheduled_start = Column(DateTime(timezone=True), nullable=True)
    scheduled_end = Column(DateTime(timezone=True), nullable=True)

    # Workflow
    workflow_status = Column(String(20), nullable=False, default="ready_for_review", index=True)
    sync_status = Column(String(20), nullable=False, default="not_synced")
    sync_error = Column(Text, nullable=True)

    created_at, updated_at = _timestamps()

    categories = relationship(
        "CategoryModel",
        secondary=collection_categories,
        back_populates="collections",
        order_by="CategoryModel.id",
        lazy="selectin",
    )
    value_per_points = relationship(
        "ValuePerPointModel",
        primaryjoin="CollectionModel.id == ValuePerPointModel.collection_id",
        cascade="all, delete-orphan",
        order_by="ValuePerPointModel.id",
        lazy="selectin",
    )


# ============================================================================
# Approval Task Model
# ============================================================================


class ApprovalTaskModel(Base):
    """Human review of one category or collection change.

    Snapshots and diff are stored as JSONB exactly as captured when the
    task was opened.
    """

    __tablename__ = "approval_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    entity_type = Column(String(20), nullable=False, index=True)
    entity_id = Column(String(50), nullable=False, index=True)
    workflow_status = Column(String(20), nullable=False, default="pending", index=True)
    priority = Column(String(10), nullable=False, default="medium")
    entity_preview = Column(String(255), nullable=True)
    summary = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    diff = Column(JSONB, nullable=False, default=dict)
    state_before = Column(JSONB, nullable=True)
    state_after = Column(JSONB, nullable=True)
    context_snapshot = Column(JSONB, nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSONB, nullable=False, default=dict)

    decision_at = Column(DateTime(timezone=True), nullable=True)

    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    collection_id = Column(
        Integer, ForeignKey("collections.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at, updated_at = _timestamps()

    category = relationship("CategoryModel", lazy="selectin")
    collection = relationship("CollectionModel", lazy="selectin")
