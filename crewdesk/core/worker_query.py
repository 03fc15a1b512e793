"""Worker Directory Query — typed filter struct to normalized predicates + page window.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Absent (None or blank) parameters impose no constraint
    - A malformed category id raises FormatError before any storage access; never dropped
    - city/state/search are case-insensitive substring matches
    - search is a disjunction over first name, last name, email and phone
    - offset = (page - 1) * limit; page and limit are both >= 1
    - total_pages = ceil(total / limit), computed from the full match count

Design Decisions:
    - Predicates are small frozen dataclasses rather than an untyped filter dict;
      each can evaluate itself against a record (in-memory repositories) and the
      SQL repository translates them one type at a time
    - Default ordering is newest first (created_at descending)
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Union

from crewdesk.core.domain_types import Availability, WorkerStatus, parse_identifier
from crewdesk.core.errors import FormatError, ValidationError

SEARCH_FIELDS = ("first_name", "last_name", "email", "phone_number")
DEFAULT_ORDER = ("created_at", "desc")


# ─── Predicates ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Equals:
    field: str
    value: Any

    def matches(self, record: Mapping[str, Any]) -> bool:
        return record.get(self.field) == self.value


@dataclass(frozen=True)
class ContainsText:
    """Case-insensitive substring match."""
    field: str
    text: str

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        if value is None:
            return False
        return self.text.lower() in str(value).lower()


@dataclass(frozen=True)
class AtLeast:
    field: str
    value: float

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = record.get(self.field)
        return value is not None and value >= self.value


@dataclass(frozen=True)
class AnyOf:
    """Disjunction — matches when any inner predicate matches."""
    predicates: tuple["Predicate", ...]

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(p.matches(record) for p in self.predicates)


Predicate = Union[Equals, ContainsText, AtLeast, AnyOf]


def matches_all(predicates: tuple[Predicate, ...], record: Mapping[str, Any]) -> bool:
    """Conjunction of all top-level predicates (empty = match everything)."""
    return all(p.matches(record) for p in predicates)


# ─── Filter / Window / Query ─────────────────────────────────────

@dataclass
class WorkerFilter:
    """One optional field per supported directory filter parameter."""
    status: WorkerStatus | None = None
    category: str | None = None
    city: str | None = None
    state: str | None = None
    availability: Availability | None = None
    min_rating: float | None = None
    is_active: bool | None = None
    search: str | None = None
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class WorkerQuery:
    predicates: tuple[Predicate, ...]
    window: PageWindow
    order_by: tuple[str, str] = DEFAULT_ORDER


@dataclass(frozen=True)
class PaginationMeta:
    current_page: int
    total_pages: int
    total_workers: int
    has_next_page: bool
    has_prev_page: bool


def _present(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_predicates(params: WorkerFilter) -> tuple[Predicate, ...]:
    """Translate present filter fields into predicates. Raises FormatError."""
    predicates: list[Predicate] = []

    if params.status is not None:
        predicates.append(Equals("status", WorkerStatus(params.status).value))

    category = _present(params.category)
    if category is not None:
        category_id = parse_identifier(category)
        if category_id is None:
            raise FormatError("Invalid category ID format", field="category")
        predicates.append(Equals("category_id", category_id))

    city = _present(params.city)
    if city is not None:
        predicates.append(ContainsText("city", city))

    state = _present(params.state)
    if state is not None:
        predicates.append(ContainsText("state", state))

    if params.availability is not None:
        predicates.append(
            Equals("availability", Availability(params.availability).value),
        )

    if params.min_rating is not None:
        predicates.append(AtLeast("rating", float(params.min_rating)))

    if params.is_active is not None:
        predicates.append(Equals("is_active", params.is_active))

    search = _present(params.search)
    if search is not None:
        predicates.append(
            AnyOf(tuple(ContainsText(f, search) for f in SEARCH_FIELDS)),
        )

    return tuple(predicates)


def build_page_window(
    page: int, limit: int, max_limit: int | None = None,
) -> PageWindow:
    if page < 1:
        raise ValidationError("page must be 1 or greater", field="page")
    if limit < 1:
        raise ValidationError("limit must be 1 or greater", field="limit")
    if max_limit is not None and limit > max_limit:
        raise ValidationError(
            f"limit cannot exceed {max_limit}", field="limit",
        )
    return PageWindow(page=page, limit=limit)


def build_worker_query(
    params: WorkerFilter, max_limit: int | None = None,
) -> WorkerQuery:
    """Normalize a WorkerFilter. Raises FormatError / ValidationError."""
    return WorkerQuery(
        predicates=build_predicates(params),
        window=build_page_window(params.page, params.limit, max_limit),
    )


def paginate(total: int, window: PageWindow) -> PaginationMeta:
    total_pages = math.ceil(total / window.limit)
    return PaginationMeta(
        current_page=window.page,
        total_pages=total_pages,
        total_workers=total,
        has_next_page=window.page < total_pages,
        has_prev_page=window.page > 1,
    )
