"""Error Handlers — global exception handlers for the Crewdesk API.

Invariants:
    - CrewdeskError → its own envelope and http_status
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500 "Something went wrong", never leaks internals

Design Decisions:
    - Three-layer handler: domain (CrewdeskError), validation (Pydantic), catch-all (Exception)
    - Client faults (4xx) log at WARNING, server faults at ERROR
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from crewdesk.core.errors import CrewdeskError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_crewdesk_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_crewdesk_error_handler(app: FastAPI) -> None:

    @app.exception_handler(CrewdeskError)
    async def crewdesk_error_handler(request: Request, exc: CrewdeskError):
        """Handle all Crewdesk domain/infrastructure errors."""
        level = logging.WARNING if exc.http_status < 500 else logging.ERROR
        logger.log(
            level,
            f"CrewdeskError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Something went wrong",
                "error": {
                    "code": "INTERNAL_ERROR",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                    "field": None,
                    "timestamp": _now_iso(),
                },
            },
        )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    errors = exc.errors()
    first_field = None
    if errors:
        first_field = ".".join(str(loc) for loc in errors[0]["loc"][1:]) or None
    return {
        "success": False,
        "message": "Invalid request data",
        "error": {
            "code": "VALIDATION_ERROR",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "field": first_field,
            "timestamp": _now_iso(),
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in errors
            ],
        },
    }
