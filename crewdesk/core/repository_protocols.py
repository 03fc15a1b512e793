"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Records cross the boundary as plain dicts with snake_case keys
    - Writes that hit a unique constraint raise DuplicateRecordError (core/errors.py)

Design Decisions:
    - Protocol over ABC: structural subtyping, the in-memory test fakes need no base class
    - Async in Protocol: boundary methods are async because implementations do IO;
      the pure rule functions that consume their results are never async
"""

from typing import Any, Protocol, Sequence
from uuid import UUID

from crewdesk.core.domain_types import CategoryId, WorkerId
from crewdesk.core.worker_query import DEFAULT_ORDER, Predicate


class CategoryRepository(Protocol):
    """Contract for category persistence — also the lookup facade used by validation."""
    async def get_by_id(self, category_id: CategoryId) -> dict | None: ...
    async def find_one_by(self, field: str, value: Any) -> dict | None: ...
    async def insert(self, data: dict) -> dict: ...
    async def find_all(
        self, is_active: bool | None = None, parent_id: UUID | None = None,
    ) -> list[dict]: ...


class WorkerRepository(Protocol):
    """Contract for worker persistence — implemented by shell."""
    async def get_by_id(self, worker_id: WorkerId) -> dict | None: ...
    async def find_one_by(self, field: str, value: Any) -> dict | None: ...
    async def insert(self, data: dict) -> dict: ...
    async def update_by_id(
        self, worker_id: WorkerId, changes: dict,
    ) -> dict | None: ...
    async def delete_by_id(self, worker_id: WorkerId) -> bool: ...
    async def find(
        self, predicates: Sequence[Predicate], offset: int, limit: int,
        order_by: tuple[str, str] = DEFAULT_ORDER,
    ) -> list[dict]: ...
    async def count(self, predicates: Sequence[Predicate]) -> int: ...


class ChannelAdapter(Protocol):
    """One outbound messaging transport, consumed by the notification dispatcher."""
    name: str
    priority: int

    def is_enabled(self) -> bool: ...
    async def send(self, recipient: str, message: str) -> bool: ...
