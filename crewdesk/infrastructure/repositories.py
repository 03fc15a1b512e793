"""SQL Repositories — async SQLAlchemy implementations of the core boundary protocols.

Invariants:
    - Every method returns plain dicts (never ORM instances) to the caller
    - A unique-constraint violation on write raises DuplicateRecordError(field)
      after rolling back; any other integrity failure raises DatabaseError
    - A value the column cannot hold (DataError) raises ValidationError; rule 1
      bounds lengths first, this only catches what slips past it
    - The colliding field is read from the constraint name (asyncpg) or the
      column in the message (SQLite), never from the duplicated value
    - Predicates are translated type by type; an unknown predicate is a bug (TypeError)
    - Listing order is created_at DESC with id as a tie-breaker

Design Decisions:
    - Repositories commit their own writes: each operation is one unit of work
    - Rows are re-selected with populate_existing after a write so the
      category relationship is loaded eagerly inside the async context
"""

import logging
import re
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from crewdesk.core.domain_types import CategoryId, WorkerId
from crewdesk.core.errors import DatabaseError, DuplicateRecordError, ValidationError
from crewdesk.core.worker_query import (
    DEFAULT_ORDER, AnyOf, AtLeast, ContainsText, Equals, Predicate,
)
from crewdesk.models.category import Category
from crewdesk.models.worker import Worker

logger = logging.getLogger(__name__)

# Constraint and unique-index names from models/ and alembic/versions/
_CONSTRAINT_FIELDS = {
    "uq_workers_email": "email",
    "uq_workers_phone_number": "phone_number",
    "uq_workers_user_id": "user_id",
    "ix_categories_name": "name",
}
_UNIQUE_COLUMNS = frozenset(_CONSTRAINT_FIELDS.values())

# SQLite names the column, never the value: "UNIQUE constraint failed: workers.email"
_SQLITE_UNIQUE = re.compile(r"unique constraint failed: \w+\.(\w+)", re.IGNORECASE)
_UNIQUE_VIOLATION_SQLSTATE = "23505"


def _driver_error(error: IntegrityError):
    """The asyncpg exception under the DBAPI adapter, if there is one."""
    return getattr(error.orig, "__cause__", None)


def _duplicate_field(error: IntegrityError) -> str | None:
    """Which unique field collided: asyncpg constraint name, else SQLite column."""
    constraint = getattr(_driver_error(error), "constraint_name", None)
    if constraint is not None:
        return _CONSTRAINT_FIELDS.get(constraint)
    match = _SQLITE_UNIQUE.search(str(error.orig))
    if match and match.group(1) in _UNIQUE_COLUMNS:
        return match.group(1)
    return None


def _is_unique_violation(error: IntegrityError) -> bool:
    sqlstate = getattr(_driver_error(error), "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
    return _SQLITE_UNIQUE.search(str(error.orig)) is not None


async def _commit(db: AsyncSession, operation: str) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if _is_unique_violation(e):
            field = _duplicate_field(e)
            logger.warning(
                f"Unique constraint rejected {operation}",
                extra={"error_code": "DUPLICATE_RECORD"},
            )
            raise DuplicateRecordError(field) from e
        logger.error(f"DB integrity error during {operation}: {e}")
        raise DatabaseError("Integrity constraint violated", operation) from e
    except DataError as e:
        await db.rollback()
        logger.warning(
            f"Value rejected by storage during {operation}: {e.orig}",
            extra={"error_code": "VALIDATION_ERROR"},
        )
        raise ValidationError("A field value does not fit its stored format") from e


def _escape_like(text: str) -> str:
    return (
        text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


def _column(field: str):
    column = Worker.__table__.columns.get(field)
    if column is None:
        raise ValueError(f"Unknown worker field: {field}")
    return getattr(Worker, field)


def predicate_to_clause(predicate: Predicate) -> ColumnElement[bool]:
    """Translate one core predicate into a SQLAlchemy boolean clause."""
    if isinstance(predicate, Equals):
        return _column(predicate.field) == predicate.value
    if isinstance(predicate, ContainsText):
        return _column(predicate.field).ilike(
            f"%{_escape_like(predicate.text)}%", escape="\\",
        )
    if isinstance(predicate, AtLeast):
        return _column(predicate.field) >= predicate.value
    if isinstance(predicate, AnyOf):
        return or_(*(predicate_to_clause(p) for p in predicate.predicates))
    raise TypeError(f"Unsupported predicate: {predicate!r}")


# ─── Serialization ───────────────────────────────────────────────

def worker_to_dict(worker: Worker) -> dict:
    category = worker.category
    return {
        "id": worker.id,
        "first_name": worker.first_name,
        "last_name": worker.last_name,
        "email": worker.email,
        "phone_number": worker.phone_number,
        "street": worker.street,
        "city": worker.city,
        "state": worker.state,
        "zip_code": worker.zip_code,
        "country": worker.country,
        "category_id": worker.category_id,
        "category": (
            {
                "id": category.id,
                "name": category.name,
                "description": category.description,
            }
            if category is not None else None
        ),
        "skills": list(worker.skills or []),
        "experience": worker.experience,
        "hourly_rate": worker.hourly_rate,
        "availability": worker.availability,
        "rating": worker.rating,
        "total_jobs": worker.total_jobs,
        "completed_jobs": worker.completed_jobs,
        "profile_image": worker.profile_image,
        "is_verified": worker.is_verified,
        "is_active": worker.is_active,
        "status": worker.status,
        "verification_notes": worker.verification_notes,
        "user_id": worker.user_id,
        "created_at": worker.created_at,
        "updated_at": worker.updated_at,
    }


def category_to_dict(category: Category, parent_name: str | None = None) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "icon": category.icon,
        "is_active": category.is_active,
        "parent_id": category.parent_id,
        "parent": (
            {"id": category.parent_id, "name": parent_name}
            if category.parent_id is not None else None
        ),
        "sort_order": category.sort_order,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


# ─── Workers ─────────────────────────────────────────────────────

class SqlWorkerRepository:
    """WorkerRepository over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def _load(self, worker_id: UUID) -> Worker | None:
        result = await self._db.execute(
            select(Worker)
            .options(selectinload(Worker.category))
            .where(Worker.id == worker_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, worker_id: WorkerId) -> dict | None:
        worker = await self._load(worker_id)
        return worker_to_dict(worker) if worker else None

    async def find_one_by(self, field: str, value: Any) -> dict | None:
        result = await self._db.execute(
            select(Worker)
            .options(selectinload(Worker.category))
            .where(_column(field) == value)
            .limit(1),
        )
        worker = result.scalar_one_or_none()
        return worker_to_dict(worker) if worker else None

    async def insert(self, data: dict) -> dict:
        worker = Worker(**data)
        self._db.add(worker)
        await _commit(self._db, "insert")
        return worker_to_dict(await self._load(worker.id))

    async def update_by_id(
        self, worker_id: WorkerId, changes: dict,
    ) -> dict | None:
        worker = await self._load(worker_id)
        if worker is None:
            return None
        for key, value in changes.items():
            setattr(worker, key, value)
        await _commit(self._db, "update")
        return worker_to_dict(await self._load(worker_id))

    async def delete_by_id(self, worker_id: WorkerId) -> bool:
        worker = await self._db.get(Worker, worker_id)
        if worker is None:
            return False
        await self._db.delete(worker)
        await _commit(self._db, "delete")
        return True

    async def find(
        self,
        predicates: Sequence[Predicate],
        offset: int,
        limit: int,
        order_by: tuple[str, str] = DEFAULT_ORDER,
    ) -> list[dict]:
        field, direction = order_by
        column = _column(field)
        ordering = column.desc() if direction == "desc" else column.asc()
        query = (
            select(Worker)
            .options(selectinload(Worker.category))
            .where(*(predicate_to_clause(p) for p in predicates))
            .order_by(ordering, Worker.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._db.execute(query)
        return [worker_to_dict(w) for w in result.scalars().all()]

    async def count(self, predicates: Sequence[Predicate]) -> int:
        query = (
            select(func.count())
            .select_from(Worker)
            .where(*(predicate_to_clause(p) for p in predicates))
        )
        result = await self._db.execute(query)
        return int(result.scalar_one())


# ─── Categories ──────────────────────────────────────────────────

class SqlCategoryRepository:
    """CategoryRepository over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    def _select_with_parent(self):
        parent = aliased(Category)
        return (
            select(Category, parent.name)
            .outerjoin(parent, Category.parent_id == parent.id)
        )

    async def get_by_id(self, category_id: CategoryId) -> dict | None:
        result = await self._db.execute(
            self._select_with_parent().where(Category.id == category_id),
        )
        row = result.first()
        return category_to_dict(row[0], row[1]) if row else None

    async def find_one_by(self, field: str, value: Any) -> dict | None:
        column = getattr(Category, field)
        result = await self._db.execute(
            self._select_with_parent().where(column == value).limit(1),
        )
        row = result.first()
        return category_to_dict(row[0], row[1]) if row else None

    async def insert(self, data: dict) -> dict:
        category = Category(**data)
        self._db.add(category)
        await _commit(self._db, "insert")
        return await self.get_by_id(category.id)

    async def find_all(
        self, is_active: bool | None = None, parent_id: UUID | None = None,
    ) -> list[dict]:
        query = self._select_with_parent()
        if is_active is not None:
            query = query.where(Category.is_active == is_active)
        if parent_id is None:
            query = query.where(Category.parent_id.is_(None))
        else:
            query = query.where(Category.parent_id == parent_id)
        query = query.order_by(Category.sort_order.asc(), Category.name.asc())
        result = await self._db.execute(query)
        return [category_to_dict(row[0], row[1]) for row in result.all()]
