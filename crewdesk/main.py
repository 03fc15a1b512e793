"""Crewdesk API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CrewdeskError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, HTTP client and notification dispatcher are created in the
      lifespan and torn down in reverse order

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Dispatcher lives on app.state; in-flight confirmations are drained
      before the shared HTTP client closes
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crewdesk.api.error_handlers import register_error_handlers
from crewdesk.api.routes import categories, health, workers
from crewdesk.config import NotificationConfig, get_settings
from crewdesk.infrastructure.channels import build_channels
from crewdesk.infrastructure.database import init_db
from crewdesk.infrastructure.observability import setup_logging
from crewdesk.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    notification_config = NotificationConfig.from_settings(settings)
    http_client = httpx.AsyncClient()
    dispatcher = NotificationDispatcher(
        build_channels(notification_config, http_client),
        config=notification_config,
    )
    app.state.dispatcher = dispatcher
    enabled = [c.name for c in dispatcher.channels if c.is_enabled()]
    logger.info(f"Crewdesk API started (channels: {enabled or 'none'})")

    yield

    logger.info("Crewdesk API shutting down")
    await dispatcher.drain()
    await http_client.aclose()
    await manager.dispose()


app = FastAPI(title="Crewdesk API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(workers.router)
app.include_router(categories.router)

register_error_handlers(app)
