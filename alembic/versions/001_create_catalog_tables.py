"""Create catalog and approval workflow tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def _workflow_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "workflow_status",
            sa.String(20),
            nullable=False,
            server_default="ready_for_review",
            index=True,
        ),
        sa.Column("sync_status", sa.String(20), nullable=False, server_default="not_synced"),
        sa.Column("sync_error", sa.Text, nullable=True),
    ]


def upgrade() -> None:
    """Create catalog tables."""
    # Reference data
    op.create_table(
        "currencies",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(10), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("symbol", sa.String(10), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "sales_channels",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=True),
        *_timestamps(),
    )

    # Catalog entities
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("slug", sa.String(255), nullable=True, unique=True, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("visibility", sa.String(20), nullable=True, server_default="public"),
        sa.Column("sort_rank", sa.Integer, nullable=True),
        sa.Column(
            "parent_id",
            sa.Integer,
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_workflow_columns(),
        *_timestamps(),
    )

    op.create_table(
        "collections",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("slug", sa.String(255), nullable=True, unique=True, index=True),
        sa.Column("tagline", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("visibility", sa.String(20), nullable=True, server_default="public"),
        sa.Column("sort_rank", sa.Integer, nullable=True),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_end", sa.DateTime(timezone=True), nullable=True),
        *_workflow_columns(),
        *_timestamps(),
    )

    op.create_table(
        "collection_categories",
        sa.Column(
            "collection_id",
            sa.Integer,
            sa.ForeignKey("collections.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "value_per_points",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "collection_id",
            sa.Integer,
            sa.ForeignKey("collections.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "currency_id",
            sa.Integer,
            sa.ForeignKey("currencies.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "sales_channel_id",
            sa.Integer,
            sa.ForeignKey("sales_channels.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("vpp", sa.Numeric(12, 4), nullable=True),
    )

    # Approval workflow
    op.create_table(
        "approval_tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("entity_type", sa.String(20), nullable=False, index=True),
        sa.Column("entity_id", sa.String(50), nullable=False, index=True),
        sa.Column(
            "workflow_status",
            sa.String(20),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("entity_preview", sa.String(255), nullable=True),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("diff", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("state_before", postgresql.JSONB, nullable=True),
        sa.Column("state_after", postgresql.JSONB, nullable=True),
        sa.Column("context_snapshot", postgresql.JSONB, nullable=True),
        sa.Column("metadata", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("decision_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "collection_id",
            sa.Integer,
            sa.ForeignKey("collections.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table("approval_tasks")
    op.drop_table("value_per_points")
    op.drop_table("collection_categories")
    op.drop_table("collections")
    op.drop_table("categories")
    op.drop_table("sales_channels")
    op.drop_table("currencies")
