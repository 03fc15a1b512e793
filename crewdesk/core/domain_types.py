"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - WorkerId, CategoryId wrap UUIDs — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching
    - parse_identifier() is the single place an external id string becomes a UUID

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

WorkerId = NewType("WorkerId", UUID)
CategoryId = NewType("CategoryId", UUID)


def parse_identifier(value: object) -> UUID | None:
    """Return the UUID for value, or None if it is not a valid identifier."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UUID(value.strip())
    except ValueError:
        return None


class Role(str, Enum):
    """Caller roles asserted by the upstream authenticator."""
    ADMIN = "admin"
    WORKER = "worker"
    USER = "user"


@dataclass(frozen=True)
class Identity:
    """An already-verified caller. Credentials are checked before this exists."""
    user_id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ─── Enums ───────────────────────────────────────────────────────

class Availability(str, Enum):
    """How a worker takes jobs."""
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    ON_DEMAND = "on-demand"


class WorkerStatus(str, Enum):
    """Worker lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class RegistrationState(str, Enum):
    """Per-attempt registration workflow. REJECTED only follows VALIDATING."""
    VALIDATING = "validating"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    DONE = "done"
    REJECTED = "rejected"


class ChannelName(str, Enum):
    """Outbound messaging channels known to the dispatcher."""
    WHATSAPP = "whatsapp"
    SMS = "sms"
