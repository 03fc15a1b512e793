"""Route Dependencies — wires request-scoped repositories and services.

Invariants:
    - One AsyncSession per request, shared by every repository in that request
    - The dispatcher is process-wide (app.state), built once by the lifespan
    - Caller identity is read from headers set by the authenticating gateway
      (X-User-Id, X-User-Role); no credential is verified here

Design Decisions:
    - Plain Depends() factories: tests override get_db / get_dispatcher only
    - A missing or unreadable identity is UnauthorizedError (401); whether that
      identity may act is decided in the service (403)
"""

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crewdesk.config import get_settings
from crewdesk.core.domain_types import Identity, Role, parse_identifier
from crewdesk.core.errors import UnauthorizedError
from crewdesk.infrastructure.database import get_db
from crewdesk.infrastructure.repositories import (
    SqlCategoryRepository, SqlWorkerRepository,
)
from crewdesk.services.category_catalog import CategoryCatalog
from crewdesk.services.notification_dispatcher import NotificationDispatcher
from crewdesk.services.worker_onboarding import WorkerOnboarding


def get_dispatcher(request: Request) -> NotificationDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise RuntimeError("Notification dispatcher not initialized")
    return dispatcher


def get_onboarding(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> WorkerOnboarding:
    return WorkerOnboarding(
        workers=SqlWorkerRepository(db),
        categories=SqlCategoryRepository(db),
        dispatcher=dispatcher,
        max_page_limit=get_settings().max_page_limit,
    )


def get_catalog(db: AsyncSession = Depends(get_db)) -> CategoryCatalog:
    return CategoryCatalog(SqlCategoryRepository(db))


def get_current_identity(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Identity:
    if not x_user_id or not x_user_role:
        raise UnauthorizedError()
    user_id = parse_identifier(x_user_id)
    if user_id is None:
        raise UnauthorizedError("Invalid caller identity")
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise UnauthorizedError("Invalid caller role")
    return Identity(user_id=user_id, role=role)
