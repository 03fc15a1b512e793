"""Worker Routes — registration, directory listing and per-worker CRUD.

Invariants:
    - Routes never contain business logic (delegate to WorkerOnboarding)
    - Registration responds as soon as the worker is persisted; the
      confirmation message is sent in the background
    - Query parameters are camelCase on the wire (minRating, isActive)
    - PUT and DELETE require a caller identity (401 without one)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from crewdesk.config import get_settings
from crewdesk.core.domain_types import Availability, Identity, WorkerStatus
from crewdesk.core.worker_query import WorkerFilter
from crewdesk.api.dependencies import get_current_identity, get_onboarding
from crewdesk.schemas.worker import (
    MessageEnvelope, PaginationOut, WorkerData, WorkerEnvelope,
    WorkerListData, WorkerListEnvelope, WorkerRegistration, WorkerResponse,
    WorkerUpdate,
)
from crewdesk.services.worker_onboarding import WorkerOnboarding

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/workers", tags=["workers"])


def _envelope(message: str, worker: dict) -> WorkerEnvelope:
    return WorkerEnvelope(
        message=message,
        data=WorkerData(worker=WorkerResponse.from_record(worker)),
    )


@router.post(
    "", response_model=WorkerEnvelope, status_code=status.HTTP_201_CREATED,
)
async def register_worker(
    body: WorkerRegistration,
    onboarding: WorkerOnboarding = Depends(get_onboarding),
):
    """Register a worker and queue the confirmation message."""
    result = await onboarding.register(body.to_draft())
    return _envelope("Worker registered successfully", result.worker)


@router.get("", response_model=WorkerListEnvelope)
async def list_workers(
    page: int = Query(1),
    limit: int | None = Query(None),
    worker_status: WorkerStatus | None = Query(None, alias="status"),
    category: str | None = Query(None),
    city: str | None = Query(None),
    state: str | None = Query(None),
    availability: Availability | None = Query(None),
    min_rating: float | None = Query(None, alias="minRating", allow_inf_nan=False),
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None),
    onboarding: WorkerOnboarding = Depends(get_onboarding),
):
    """Filtered, paginated directory listing, newest first."""
    result = await onboarding.list_workers(WorkerFilter(
        status=worker_status,
        category=category,
        city=city,
        state=state,
        availability=availability,
        min_rating=min_rating,
        is_active=is_active,
        search=search,
        page=page,
        limit=limit if limit is not None else get_settings().default_page_limit,
    ))
    return WorkerListEnvelope(
        message="Workers retrieved successfully",
        data=WorkerListData(
            workers=[WorkerResponse.from_record(w) for w in result.workers],
            pagination=PaginationOut.from_meta(result.pagination),
        ),
    )


@router.get("/{worker_id}", response_model=WorkerEnvelope)
async def get_worker(
    worker_id: str, onboarding: WorkerOnboarding = Depends(get_onboarding),
):
    worker = await onboarding.get_worker(worker_id)
    return _envelope("Worker retrieved successfully", worker)


@router.put("/{worker_id}", response_model=WorkerEnvelope)
async def update_worker(
    worker_id: str,
    body: WorkerUpdate,
    identity: Identity = Depends(get_current_identity),
    onboarding: WorkerOnboarding = Depends(get_onboarding),
):
    """Partial update: only the fields present in the body change."""
    worker = await onboarding.update_worker(
        worker_id, body.to_changes(), actor=identity,
    )
    return _envelope("Worker updated successfully", worker)


@router.delete("/{worker_id}", response_model=MessageEnvelope)
async def delete_worker(
    worker_id: str,
    identity: Identity = Depends(get_current_identity),
    onboarding: WorkerOnboarding = Depends(get_onboarding),
):
    await onboarding.delete_worker(worker_id, actor=identity)
    return MessageEnvelope(message="Worker deleted successfully")
