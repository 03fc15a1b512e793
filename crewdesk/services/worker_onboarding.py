"""Worker Onboarding — registration workflow and directory listing over the repositories.

Invariants:
    - Registration: validating -> persisting -> notifying -> done;
      rejected is reachable only from validating
    - Once persisting succeeds the workflow always reaches done; the
      confirmation notification can never turn a registration into a failure
    - A unique-constraint race on insert/update surfaces as ConflictError, the
      same type the validation pre-check raises; nothing is retried here
    - Malformed ids raise FormatError before any repository call
    - Deletion needs an admin actor; updates need an admin or the linked user

Design Decisions:
    - The confirmation is an explicit background task (dispatcher.start); its
      outcome is logged by a done-callback and then dropped on purpose, so the
      HTTP response never waits on a messaging transport
    - Repositories and dispatcher are constructor parameters
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from uuid import UUID

from crewdesk.core.domain_types import (
    Identity, RegistrationState, WorkerId, parse_identifier,
)
from crewdesk.core.enforce_access import check_admin, check_can_update
from crewdesk.core.errors import (
    ConflictError, CrewdeskError, DuplicateRecordError, FormatError, NotFoundError,
)
from crewdesk.core.repository_protocols import CategoryRepository, WorkerRepository
from crewdesk.core.worker_query import (
    PaginationMeta, WorkerFilter, build_worker_query, paginate,
)
from crewdesk.core.worker_validation import (
    WorkerDraft, validate_registration, validate_update,
)
from crewdesk.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGES = {
    "email": ("Worker with this email already exists", "email"),
    "phone_number": ("Worker with this phone number already exists", "phoneNumber"),
    "user_id": ("A worker is already linked to this user", "userId"),
}


@dataclass
class RegistrationResult:
    worker: dict
    state: RegistrationState
    notification: asyncio.Task | None = None


@dataclass
class WorkerPage:
    workers: list[dict]
    pagination: PaginationMeta


def require_identifier(raw_id: str, label: str, field: str = "id") -> UUID:
    """Parse an external id or raise FormatError."""
    parsed = parse_identifier(raw_id)
    if parsed is None:
        raise FormatError(f"Invalid {label} ID format: {raw_id}", field=field)
    return parsed


def conflict_from_duplicate(error: DuplicateRecordError) -> ConflictError:
    message, label = _DUPLICATE_MESSAGES.get(
        error.field, ("Duplicate field value. Please use another value.", error.field),
    )
    return ConflictError(message, field=label)


def _log_confirmation_outcome(worker_id: WorkerId, task: asyncio.Task) -> None:
    """Done-callback: log the confirmation outcome, then let it go."""
    if task.cancelled():
        logger.warning(
            "Registration confirmation cancelled", extra={"worker_id": worker_id},
        )
        return
    error = task.exception()
    if error is not None:
        logger.error(
            f"Registration confirmation crashed: {error}",
            extra={"worker_id": worker_id},
        )
        return
    outcome = task.result()
    logger.info(
        "Registration confirmation "
        + ("sent" if outcome.delivered else f"skipped ({outcome.reason})"),
        extra={
            "worker_id": worker_id,
            "channel": outcome.channel,
            "delivered": outcome.delivered,
        },
    )


class WorkerOnboarding:
    """Registration, lookup, update, delete and listing of workers."""

    def __init__(
        self,
        workers: WorkerRepository,
        categories: CategoryRepository,
        dispatcher: NotificationDispatcher,
        max_page_limit: int | None = None,
    ):
        self._workers = workers
        self._categories = categories
        self._dispatcher = dispatcher
        self._max_page_limit = max_page_limit

    async def register(self, draft: WorkerDraft) -> RegistrationResult:
        state = RegistrationState.VALIDATING
        try:
            validated = await validate_registration(
                draft, self._categories, self._workers,
            )
        except CrewdeskError as e:
            state = RegistrationState.REJECTED
            logger.info(
                f"Registration rejected: {e.message}",
                extra={"registration_state": state.value, "error_code": e.code},
            )
            raise

        state = RegistrationState.PERSISTING
        try:
            worker = await self._workers.insert(validated.to_record())
        except DuplicateRecordError as e:
            logger.warning(
                "Registration lost a uniqueness race",
                extra={"registration_state": state.value, "error_code": "CONFLICT"},
            )
            raise conflict_from_duplicate(e) from e

        state = RegistrationState.NOTIFYING
        task = self._dispatcher.start(
            self._dispatcher.confirm_registration(
                worker["phone_number"], worker["first_name"],
            ),
        )
        # Outcome is logged and discarded; registration does not depend on it.
        task.add_done_callback(partial(_log_confirmation_outcome, worker["id"]))

        state = RegistrationState.DONE
        logger.info(
            "Worker registered",
            extra={"worker_id": worker["id"], "registration_state": state.value},
        )
        return RegistrationResult(worker=worker, state=state, notification=task)

    async def list_workers(self, params: WorkerFilter) -> WorkerPage:
        query = build_worker_query(params, self._max_page_limit)
        total = await self._workers.count(query.predicates)
        workers = await self._workers.find(
            query.predicates,
            offset=query.window.offset,
            limit=query.window.limit,
            order_by=query.order_by,
        )
        return WorkerPage(workers=workers, pagination=paginate(total, query.window))

    async def get_worker(self, raw_id: str) -> dict:
        worker_id = WorkerId(require_identifier(raw_id, "worker"))
        worker = await self._workers.get_by_id(worker_id)
        if worker is None:
            raise NotFoundError("Worker not found", "Worker", raw_id)
        return worker

    async def update_worker(
        self, raw_id: str, changes: dict, actor: Identity,
    ) -> dict:
        """Partial replacement; id and timestamps are never changed."""
        worker_id = WorkerId(require_identifier(raw_id, "worker"))
        current = await self._workers.get_by_id(worker_id)
        if current is None:
            raise NotFoundError("Worker not found", "Worker", raw_id)
        denied = check_can_update(actor, current, changes)
        if denied is not None:
            raise denied

        record = await validate_update(
            worker_id, changes, self._categories, self._workers,
        )
        try:
            worker = await self._workers.update_by_id(worker_id, record)
        except DuplicateRecordError as e:
            raise conflict_from_duplicate(e) from e
        if worker is None:
            raise NotFoundError("Worker not found", "Worker", raw_id)
        logger.info("Worker updated", extra={"worker_id": worker_id})
        return worker

    async def delete_worker(self, raw_id: str, actor: Identity) -> None:
        """Administrative removal."""
        denied = check_admin(actor)
        if denied is not None:
            raise denied
        worker_id = WorkerId(require_identifier(raw_id, "worker"))
        if not await self._workers.delete_by_id(worker_id):
            raise NotFoundError("Worker not found", "Worker", raw_id)
        logger.info("Worker deleted", extra={"worker_id": worker_id})
