"""Worker Schemas — camelCase request/response contracts for the worker directory.

Invariants:
    - Request fields are all optional at this layer; presence and the ordered
      business rules are enforced by core/worker_validation.py so the first
      violated rule (not pydantic) decides the error
    - Type coercion failures (e.g. hourlyRate "abc") are rejected here as 400,
      and so are non-finite numbers (NaN, Infinity)
    - Responses always serialize by alias (camelCase) and include fullName

Design Decisions:
    - alias_generator=to_camel + populate_by_name: snake_case in Python,
      camelCase on the wire, either accepted on input
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from crewdesk.core.domain_types import Availability, WorkerStatus
from crewdesk.core.worker_query import PaginationMeta
from crewdesk.core.worker_validation import AddressDraft, WorkerDraft


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── Requests ────────────────────────────────────────────────────

class AddressIn(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class WorkerRegistration(CamelModel):
    """POST /workers body."""
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    address: AddressIn | None = None
    category: str | None = None
    skills: list[str] | None = None
    experience: float | None = Field(None, allow_inf_nan=False)
    hourly_rate: float | None = Field(None, allow_inf_nan=False)
    availability: Availability | None = None

    def to_draft(self) -> WorkerDraft:
        address = None
        if self.address is not None:
            address = AddressDraft(**self.address.model_dump())
        return WorkerDraft(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone_number=self.phone_number,
            address=address,
            category=self.category,
            skills=self.skills,
            experience=self.experience,
            hourly_rate=self.hourly_rate,
            availability=self.availability,
        )


class WorkerUpdate(CamelModel):
    """PUT /workers/{id} body — only the fields sent are applied."""
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    address: AddressIn | None = None
    category: str | None = None
    skills: list[str] | None = None
    experience: float | None = Field(None, allow_inf_nan=False)
    hourly_rate: float | None = Field(None, allow_inf_nan=False)
    availability: Availability | None = None
    status: WorkerStatus | None = None
    rating: float | None = Field(None, allow_inf_nan=False)
    total_jobs: int | None = None
    completed_jobs: int | None = None
    profile_image: str | None = Field(None, max_length=500)
    is_verified: bool | None = None
    is_active: bool | None = None
    verification_notes: str | None = None
    user_id: UUID | None = None

    def to_changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# ─── Responses ───────────────────────────────────────────────────

class AddressOut(CamelModel):
    street: str | None = None
    city: str
    state: str
    zip_code: str | None = None
    country: str


class CategorySummary(CamelModel):
    id: UUID
    name: str
    description: str | None = None


class WorkerResponse(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone_number: str
    address: AddressOut
    category: CategorySummary | None = None
    skills: list[str]
    experience: float
    hourly_rate: float
    availability: Availability
    rating: float
    total_jobs: int
    completed_jobs: int
    profile_image: str | None = None
    is_verified: bool
    is_active: bool
    status: WorkerStatus
    verification_notes: str | None = None
    user_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: dict) -> "WorkerResponse":
        return cls(
            **{k: v for k, v in record.items() if k in cls.model_fields},
            full_name=f"{record['first_name']} {record['last_name']}",
            address=AddressOut(
                street=record["street"],
                city=record["city"],
                state=record["state"],
                zip_code=record["zip_code"],
                country=record["country"],
            ),
        )


class PaginationOut(CamelModel):
    current_page: int
    total_pages: int
    total_workers: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_meta(cls, meta: PaginationMeta) -> "PaginationOut":
        return cls(
            current_page=meta.current_page,
            total_pages=meta.total_pages,
            total_workers=meta.total_workers,
            has_next_page=meta.has_next_page,
            has_prev_page=meta.has_prev_page,
        )


class WorkerData(CamelModel):
    worker: WorkerResponse


class WorkerListData(CamelModel):
    workers: list[WorkerResponse]
    pagination: PaginationOut


class WorkerEnvelope(CamelModel):
    success: bool = True
    message: str
    data: WorkerData


class WorkerListEnvelope(CamelModel):
    success: bool = True
    message: str
    data: WorkerListData


class MessageEnvelope(CamelModel):
    success: bool = True
    message: str
