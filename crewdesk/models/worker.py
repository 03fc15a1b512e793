"""Worker ORM — persists a registered service provider.

Invariants:
    - email (lowercased before insert), phone_number and user_id are unique;
      these constraints turn a lost registration race into DuplicateRecordError
    - category_id is required and references categories.id
    - status in {pending, approved, rejected, suspended}, default pending
    - availability in {full-time, part-time, on-demand}, default on-demand

Design Decisions:
    - Address stored as flat columns (street/city/state/zip_code/country):
      city and state are filtered on directly
    - JSON column for skills: ordered list of strings
    - Constraint names are explicit so repositories can tell which field collided
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crewdesk.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Worker(Base):
    """Worker entity — a provider listed in the directory."""
    __tablename__ = "workers"
    __table_args__ = (
        UniqueConstraint("email", name="uq_workers_email"),
        UniqueConstraint("phone_number", name="uq_workers_phone_number"),
        UniqueConstraint("user_id", name="uq_workers_user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)

    # Address
    street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(
        String(120), nullable=False, default="USA",
    )

    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("categories.id"), nullable=False, index=True,
    )
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    hourly_rate: Mapped[float] = mapped_column(Float, nullable=False)
    availability: Mapped[str] = mapped_column(
        String(20), nullable=False, default="on-demand",
    )

    # Reputation
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_jobs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_jobs: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )

    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True,
    )
    verification_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now,
    )

    # Relationships
    category: Mapped["Category"] = relationship("Category", lazy="selectin")
