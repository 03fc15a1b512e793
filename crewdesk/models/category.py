"""Category ORM — persists a service classification, optionally nested under a parent.

Invariants:
    - name is unique
    - parent_id is a nullable self-reference; acyclicity is NOT enforced

Design Decisions:
    - Generic Uuid column type: native UUID on PostgreSQL, CHAR(32) on SQLite
    - No ORM relationship for parent: the parent name is read with an aliased
      join, so a cyclic chain never triggers recursive loading
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from crewdesk.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """Service category — workers register under exactly one."""
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True,
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("categories.id"), nullable=True, index=True,
    )
    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now,
    )
