"""Error Hierarchy — typed, categorized exceptions for all Crewdesk failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client-fault errors are 400-level; infrastructure errors are 500-level
    - to_response() produces the REST envelope ({"success": false, "message", "error"})
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CrewdeskError base: FastAPI global handler catches all
    - DuplicateRecordError sits outside the hierarchy: it is the storage-level
      signal a repository raises, translated to ConflictError by the caller
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories — maps onto client-fault / not-found / conflict."""
    VALIDATION = "validation"
    FORMAT = "format"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    field_name: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class CrewdeskError(Exception):
    """Base exception for all Crewdesk errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "success": False,
            "message": self.message,
            "error": {
                "code": self.code,
                "category": self.category.value,
                "severity": self.severity.value,
                "field": self.context.field_name,
                "timestamp": self.context.timestamp.isoformat(),
            },
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(CrewdeskError):
    """A required field is missing or a field value is malformed."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.field_name = field
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field


class FormatError(CrewdeskError):
    """An identifier is not syntactically valid."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.field_name = field
        super().__init__(
            message, "INVALID_IDENTIFIER", ErrorCategory.FORMAT,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field


class NotFoundError(CrewdeskError):
    """Requested or referenced resource does not exist."""
    def __init__(
        self, message: str, resource_type: str, resource_id: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            message, "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(CrewdeskError):
    """Request conflicts with current state (duplicate, inactive reference)."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.field_name = field
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.field = field


class UnauthorizedError(CrewdeskError):
    """No verified caller identity accompanied a request that needs one."""
    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, None, 401,
        )


class ForbiddenError(CrewdeskError):
    """Caller is known but may not perform the operation."""
    def __init__(
        self, message: str = "Access denied. Insufficient permissions.",
        field: str | None = None,
    ):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, ErrorContext(field_name=field), 403,
        )
        self.field = field


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ExternalServiceError(CrewdeskError):
    """Outbound messaging transport failed. Contained by the dispatcher."""
    def __init__(
        self, message: str, service: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{service} request failed: {message}",
            "EXTERNAL_SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 502,
        )
        self.service = service


class DatabaseError(CrewdeskError):
    """Database operation failed for a reason callers cannot act on."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Storage Signals ────────────────────────────────────────────

class DuplicateRecordError(Exception):
    """Unique constraint rejected a write. field is None when it cannot be told."""
    def __init__(self, field: str | None = None):
        super().__init__(f"duplicate value for {field or 'unique field'}")
        self.field = field
