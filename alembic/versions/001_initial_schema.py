"""Initial schema — categories, workers.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("icon", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("parent_id", sa.Uuid, sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_categories_name", "categories", ["name"], unique=True)
    op.create_index("ix_categories_is_active", "categories", ["is_active"])
    op.create_index("ix_categories_parent_id", "categories", ["parent_id"])
    op.create_index("ix_categories_sort_order", "categories", ["sort_order"])

    op.create_table(
        "workers",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("state", sa.String(120), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(120), nullable=False, server_default="USA"),
        sa.Column("category_id", sa.Uuid, sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("skills", sa.JSON, nullable=False),
        sa.Column("experience", sa.Float, nullable=False, server_default="0"),
        sa.Column("hourly_rate", sa.Float, nullable=False),
        sa.Column("availability", sa.String(20), nullable=False, server_default="on-demand"),
        sa.Column("rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_jobs", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_jobs", sa.Integer, nullable=False, server_default="0"),
        sa.Column("profile_image", sa.String(500), nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("verification_notes", sa.Text, nullable=True),
        sa.Column("user_id", sa.Uuid, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("email", name="uq_workers_email"),
        sa.UniqueConstraint("phone_number", name="uq_workers_phone_number"),
        sa.UniqueConstraint("user_id", name="uq_workers_user_id"),
    )
    op.create_index("ix_workers_city", "workers", ["city"])
    op.create_index("ix_workers_state", "workers", ["state"])
    op.create_index("ix_workers_category_id", "workers", ["category_id"])
    op.create_index("ix_workers_is_active", "workers", ["is_active"])
    op.create_index("ix_workers_status", "workers", ["status"])
    op.create_index("ix_workers_created_at", "workers", ["created_at"])


def downgrade() -> None:
    op.drop_table("workers")
    op.drop_table("categories")
