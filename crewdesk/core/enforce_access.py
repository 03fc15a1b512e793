"""Access Rules — who may change or remove a worker record.

Invariants:
    - Deletion is administrative: only Role.ADMIN passes
    - A worker record may be updated by an admin, or by the caller whose
      user_id is linked to that record
    - Non-admin owners may not touch moderation fields (status, verification,
      reputation counters, activation, user link)
    - Pure: every check returns ForbiddenError or None, no IO

Design Decisions:
    - Identity arrives already verified; nothing here inspects credentials
"""

from crewdesk.core.domain_types import Identity
from crewdesk.core.errors import ForbiddenError

# snake_case record field -> camelCase wire label
MODERATION_FIELDS = {
    "status": "status",
    "is_verified": "isVerified",
    "verification_notes": "verificationNotes",
    "is_active": "isActive",
    "rating": "rating",
    "total_jobs": "totalJobs",
    "completed_jobs": "completedJobs",
    "user_id": "userId",
}


def check_admin(identity: Identity) -> ForbiddenError | None:
    if not identity.is_admin:
        return ForbiddenError()
    return None


def check_worker_owner(identity: Identity, worker: dict) -> ForbiddenError | None:
    """Admin, or the user linked to this worker record."""
    if identity.is_admin:
        return None
    owner = worker.get("user_id")
    if owner is None or owner != identity.user_id:
        return ForbiddenError("You can only update your own worker profile")
    return None


def check_moderation_fields(identity: Identity, changes: dict) -> ForbiddenError | None:
    if identity.is_admin:
        return None
    for key, label in MODERATION_FIELDS.items():
        if key in changes:
            return ForbiddenError(
                f"Only administrators can change {label}", field=label,
            )
    return None


def check_can_update(
    identity: Identity, worker: dict, changes: dict,
) -> ForbiddenError | None:
    return (
        check_worker_owner(identity, worker)
        or check_moderation_fields(identity, changes)
    )
