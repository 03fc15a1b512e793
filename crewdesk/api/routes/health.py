"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - Readiness also reports which notification channels are configured,
      but an unconfigured channel never makes the service unready
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

import crewdesk.infrastructure.database as db_module
from crewdesk.api.dependencies import get_dispatcher
from crewdesk.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "crewdesk-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Readiness probe — database connectivity plus channel configuration."""
    manager = db_module.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    channels = {
        c.name: ("configured" if c.is_enabled() else "disabled")
        for c in dispatcher.channels
    }
    return {
        "status": "ready",
        "checks": {"database": "healthy", "channels": channels},
    }
