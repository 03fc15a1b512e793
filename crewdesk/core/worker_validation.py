"""Worker Validation — ordered rule chain guarding worker registration and updates.

Invariants:
    - Rules run in a fixed order and the FIRST violated rule wins:
        1. required fields (and field shape)   -> ValidationError
        2. category id is a valid identifier   -> ValidationError
        3. category exists                     -> NotFoundError
        4. category is active                  -> ConflictError
        5. email not registered (lowercased)   -> ConflictError
        6. phone not registered                -> ConflictError
        7. hourly rate / experience finite, >= 0 -> ValidationError
    - Rules 1, 2, 7 are PURE (return error or None); rules 3-6 only read
    - Rule 1 also bounds text fields to their column widths, so storage
      never sees a value it would truncate
    - On success the record carries defaults: skills [], experience 0,
      availability on-demand, country USA
    - Nothing here writes; persistence is the orchestrator's job

Design Decisions:
    - Pure check_* functions chained with `or`, mirroring the other rule modules:
      each is testable without repositories
    - Repositories are parameters, not imports, so tests pass in-memory fakes
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any

from crewdesk.core.domain_types import Availability, WorkerId, WorkerStatus, parse_identifier
from crewdesk.core.errors import (
    ConflictError, CrewdeskError, NotFoundError, ValidationError,
)
from crewdesk.core.repository_protocols import CategoryRepository, WorkerRepository

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
NAME_MAX_LENGTH = 50

# Column widths in models/worker.py
EMAIL_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 32
STREET_MAX_LENGTH = 255
REGION_MAX_LENGTH = 120
ZIP_MAX_LENGTH = 20
DEFAULT_COUNTRY = "USA"

REQUIRED_FIELDS_MESSAGE = (
    "Please provide all required fields: firstName, lastName, email, "
    "phoneNumber, category, and hourlyRate"
)
ADDRESS_REQUIRED_MESSAGE = "Address with city and state is required"

IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})

# Fields a partial update may change but never clear
NON_NULLABLE_FIELDS = {
    "first_name": "firstName", "last_name": "lastName", "email": "email",
    "phone_number": "phoneNumber", "category": "category",
    "hourly_rate": "hourlyRate", "experience": "experience", "skills": "skills",
    "availability": "availability", "status": "status", "rating": "rating",
    "total_jobs": "totalJobs", "completed_jobs": "completedJobs",
    "is_active": "isActive", "is_verified": "isVerified",
}


@dataclass
class AddressDraft:
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


@dataclass
class WorkerDraft:
    """Candidate registration payload — every field optional until validated."""
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    address: AddressDraft | None = None
    category: str | None = None
    skills: list[str] | None = None
    experience: float | None = None
    hourly_rate: float | None = None
    availability: Availability | None = None


@dataclass
class ValidatedWorker:
    """Normalized registration record, ready for persistence."""
    first_name: str
    last_name: str
    email: str
    phone_number: str
    city: str
    state: str
    category_id: Any
    hourly_rate: float
    street: str | None = None
    zip_code: str | None = None
    country: str = DEFAULT_COUNTRY
    skills: list[str] = field(default_factory=list)
    experience: float = 0
    availability: Availability = Availability.ON_DEMAND

    def to_record(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "category_id": self.category_id,
            "skills": list(self.skills),
            "experience": self.experience,
            "hourly_rate": self.hourly_rate,
            "availability": self.availability.value,
        }


# ─── Normalization ───────────────────────────────────────────────

def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    return phone.strip()


# ─── Pure rules ──────────────────────────────────────────────────

def check_required_fields(draft: WorkerDraft) -> ValidationError | None:
    """Rule 1a: names, email, phone, category and hourly rate present; address with city/state."""
    required = (
        ("firstName", _clean(draft.first_name)),
        ("lastName", _clean(draft.last_name)),
        ("email", _clean(draft.email)),
        ("phoneNumber", _clean(draft.phone_number)),
        ("category", _clean(draft.category)),
        ("hourlyRate", draft.hourly_rate),
    )
    for name, value in required:
        if value is None:
            return ValidationError(REQUIRED_FIELDS_MESSAGE, field=name)
    address = draft.address
    if address is None or not _clean(address.city) or not _clean(address.state):
        return ValidationError(ADDRESS_REQUIRED_MESSAGE, field="address")
    return None


def check_max_length(
    value: str | None, limit: int, field_name: str, label: str,
) -> ValidationError | None:
    if value is not None and len(value.strip()) > limit:
        return ValidationError(
            f"{label} cannot exceed {limit} characters", field=field_name,
        )
    return None


def check_name_length(value: str | None, field_name: str, label: str) -> ValidationError | None:
    return check_max_length(value, NAME_MAX_LENGTH, field_name, label)


def check_address_lengths(
    street: str | None, city: str | None, state: str | None,
    zip_code: str | None, country: str | None,
) -> ValidationError | None:
    return (
        check_max_length(street, STREET_MAX_LENGTH, "address.street", "Street")
        or check_max_length(city, REGION_MAX_LENGTH, "address.city", "City")
        or check_max_length(state, REGION_MAX_LENGTH, "address.state", "State")
        or check_max_length(zip_code, ZIP_MAX_LENGTH, "address.zipCode", "Zip code")
        or check_max_length(country, REGION_MAX_LENGTH, "address.country", "Country")
    )


def check_email_format(email: str | None) -> ValidationError | None:
    if email is not None and not EMAIL_PATTERN.match(email.strip()):
        return ValidationError("Please provide a valid email", field="email")
    return None


def check_phone_format(phone: str | None) -> ValidationError | None:
    if phone is not None and not PHONE_PATTERN.match(phone.strip()):
        return ValidationError(
            "Please provide a valid phone number", field="phoneNumber",
        )
    return None


def check_field_formats(draft: WorkerDraft) -> ValidationError | None:
    """Rule 1b: present fields have a usable shape."""
    address = draft.address or AddressDraft()
    return (
        check_name_length(draft.first_name, "firstName", "First name")
        or check_name_length(draft.last_name, "lastName", "Last name")
        or check_email_format(draft.email)
        or check_max_length(draft.email, EMAIL_MAX_LENGTH, "email", "Email")
        or check_phone_format(draft.phone_number)
        or check_max_length(
            draft.phone_number, PHONE_MAX_LENGTH, "phoneNumber", "Phone number",
        )
        or check_address_lengths(
            address.street, address.city, address.state,
            address.zip_code, address.country,
        )
    )


def check_category_identifier(category: str) -> ValidationError | None:
    """Rule 2: the category reference parses as an identifier."""
    if parse_identifier(category) is None:
        return ValidationError(
            "Invalid category ID format. Category must be a valid identifier",
            field="category",
        )
    return None


def check_category_exists(category: dict | None, raw_id: str) -> NotFoundError | None:
    """Rule 3."""
    if category is None:
        return NotFoundError(
            f"Category with ID {raw_id} does not exist", "Category", raw_id,
        )
    return None


def check_category_active(category: dict) -> ConflictError | None:
    """Rule 4."""
    if not category.get("is_active", False):
        return ConflictError(
            "The selected category is not active", field="category",
        )
    return None


def _owned_by_other(existing: dict | None, worker_id: WorkerId | None) -> bool:
    if existing is None:
        return False
    return worker_id is None or existing.get("id") != worker_id


def check_email_available(
    existing: dict | None, worker_id: WorkerId | None = None,
) -> ConflictError | None:
    """Rule 5. worker_id excludes the worker being updated."""
    if _owned_by_other(existing, worker_id):
        return ConflictError("Worker with this email already exists", field="email")
    return None


def check_phone_available(
    existing: dict | None, worker_id: WorkerId | None = None,
) -> ConflictError | None:
    """Rule 6."""
    if _owned_by_other(existing, worker_id):
        return ConflictError(
            "Worker with this phone number already exists", field="phoneNumber",
        )
    return None


def check_numeric_bounds(
    hourly_rate: float | None, experience: float | None,
) -> ValidationError | None:
    """Rule 7."""
    if hourly_rate is not None and not math.isfinite(hourly_rate):
        return ValidationError("Hourly rate must be a finite number", field="hourlyRate")
    if experience is not None and not math.isfinite(experience):
        return ValidationError("Experience must be a finite number", field="experience")
    if hourly_rate is not None and hourly_rate < 0:
        return ValidationError("Hourly rate cannot be negative", field="hourlyRate")
    if experience is not None and experience < 0:
        return ValidationError("Experience cannot be negative", field="experience")
    return None


def _raise_if(error: CrewdeskError | None) -> None:
    if error is not None:
        raise error


# ─── Lookup rules ────────────────────────────────────────────────

async def check_category_reference(
    raw_category: str, categories: CategoryRepository,
) -> Any:
    """Rules 2-4 for one category reference. Returns the parsed id."""
    _raise_if(check_category_identifier(raw_category))
    category_id = parse_identifier(raw_category)
    category = await categories.get_by_id(category_id)
    _raise_if(check_category_exists(category, raw_category.strip()))
    _raise_if(check_category_active(category))
    return category_id


async def validate_registration(
    draft: WorkerDraft,
    categories: CategoryRepository,
    workers: WorkerRepository,
) -> ValidatedWorker:
    """Run rules 1-7 in order. Raises the first violation, else returns the record."""
    _raise_if(check_required_fields(draft) or check_field_formats(draft))

    category_id = await check_category_reference(draft.category, categories)

    email = normalize_email(draft.email)
    _raise_if(check_email_available(await workers.find_one_by("email", email)))

    phone = normalize_phone(draft.phone_number)
    _raise_if(
        check_phone_available(await workers.find_one_by("phone_number", phone)),
    )

    _raise_if(check_numeric_bounds(draft.hourly_rate, draft.experience))

    address = draft.address
    return ValidatedWorker(
        first_name=draft.first_name.strip(),
        last_name=draft.last_name.strip(),
        email=email,
        phone_number=phone,
        street=_clean(address.street),
        city=address.city.strip(),
        state=address.state.strip(),
        zip_code=_clean(address.zip_code),
        country=_clean(address.country) or DEFAULT_COUNTRY,
        category_id=category_id,
        skills=[s.strip() for s in draft.skills or [] if s and s.strip()],
        experience=draft.experience or 0,
        hourly_rate=draft.hourly_rate,
        availability=Availability(draft.availability or Availability.ON_DEMAND),
    )


# ─── Partial updates ─────────────────────────────────────────────

def check_update_shape(changes: dict) -> ValidationError | None:
    """Rule 1 for partial updates: supplied fields may not be blanked or malformed."""
    for key, label in NON_NULLABLE_FIELDS.items():
        if key in changes:
            value = changes[key]
            if value is None or (isinstance(value, str) and not value.strip()):
                return ValidationError(f"{label} cannot be empty", field=label)
    if "address" in changes:
        address = changes["address"] or {}
        if not _clean(address.get("city")) or not _clean(address.get("state")):
            return ValidationError(ADDRESS_REQUIRED_MESSAGE, field="address")
    rating = changes.get("rating")
    if rating is not None and not 0 <= rating <= 5:
        return ValidationError("Rating must be between 0 and 5", field="rating")
    for key, label in (("total_jobs", "totalJobs"), ("completed_jobs", "completedJobs")):
        value = changes.get(key)
        if value is not None and value < 0:
            return ValidationError(f"{label} cannot be negative", field=label)
    address = changes.get("address") or {}
    return (
        check_name_length(changes.get("first_name"), "firstName", "First name")
        or check_name_length(changes.get("last_name"), "lastName", "Last name")
        or check_email_format(changes.get("email"))
        or check_max_length(changes.get("email"), EMAIL_MAX_LENGTH, "email", "Email")
        or check_phone_format(changes.get("phone_number"))
        or check_max_length(
            changes.get("phone_number"), PHONE_MAX_LENGTH, "phoneNumber", "Phone number",
        )
        or check_address_lengths(
            address.get("street"), address.get("city"), address.get("state"),
            address.get("zip_code"), address.get("country"),
        )
    )


def _flatten_update(changes: dict) -> dict:
    """Map the API-shaped change set onto flat record columns."""
    record: dict = {}
    for key, value in changes.items():
        if key in IMMUTABLE_FIELDS:
            continue
        if key == "address":
            record["street"] = _clean(value.get("street"))
            record["city"] = value["city"].strip()
            record["state"] = value["state"].strip()
            record["zip_code"] = _clean(value.get("zip_code"))
            record["country"] = _clean(value.get("country")) or DEFAULT_COUNTRY
        elif key in ("first_name", "last_name"):
            record[key] = value.strip()
        elif key == "skills":
            record[key] = [s.strip() for s in value or [] if s and s.strip()]
        elif key in ("availability", "status") and value is not None:
            enum_type = Availability if key == "availability" else WorkerStatus
            record[key] = enum_type(value).value
        else:
            record[key] = value
    return record


async def validate_update(
    worker_id: WorkerId,
    changes: dict,
    categories: CategoryRepository,
    workers: WorkerRepository,
) -> dict:
    """Apply the registration rule order to the supplied fields only."""
    changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
    _raise_if(check_update_shape(changes))

    if "category" in changes:
        changes["category_id"] = await check_category_reference(
            changes.pop("category"), categories,
        )

    if "email" in changes:
        changes["email"] = normalize_email(changes["email"])
        existing = await workers.find_one_by("email", changes["email"])
        _raise_if(check_email_available(existing, worker_id))

    if "phone_number" in changes:
        changes["phone_number"] = normalize_phone(changes["phone_number"])
        existing = await workers.find_one_by("phone_number", changes["phone_number"])
        _raise_if(check_phone_available(existing, worker_id))

    _raise_if(check_numeric_bounds(changes.get("hourly_rate"), changes.get("experience")))
    return _flatten_update(changes)
