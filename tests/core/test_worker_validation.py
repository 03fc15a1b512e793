"""Worker Validation — verifies the ordered registration rule chain and update rules.

Tests:
    - Each rule raises its own error kind; the first violated rule wins
    - Success applies defaults (skills [], experience 0, on-demand, USA)
    - Email uniqueness is case-insensitive; updates may keep their own email
    - Partial updates reject blanking required fields and drop immutable ones
    - Text fields are bounded by their column widths; numbers must be finite
"""

from uuid import uuid4

import pytest

from crewdesk.core.domain_types import Availability
from crewdesk.core.errors import ConflictError, NotFoundError, ValidationError
from crewdesk.core.worker_validation import (
    ADDRESS_REQUIRED_MESSAGE, REQUIRED_FIELDS_MESSAGE, AddressDraft, WorkerDraft,
    check_category_identifier, check_field_formats, check_numeric_bounds,
    check_required_fields, check_update_shape, validate_registration,
    validate_update,
)
from tests.fakes import InMemoryCategoryRepository, InMemoryWorkerRepository


@pytest.fixture
def categories():
    return InMemoryCategoryRepository()


@pytest.fixture
def workers():
    return InMemoryWorkerRepository()


@pytest.fixture
def active_category(categories):
    return categories.seed("Plumbing")


def _draft(category_id, **overrides) -> WorkerDraft:
    fields = dict(
        first_name="Anu", last_name="Raj", email="Anu@Example.com",
        phone_number="+91 98765 43210",
        address=AddressDraft(city="Kochi", state="Kerala"),
        category=str(category_id), hourly_rate=200,
    )
    fields.update(overrides)
    return WorkerDraft(**fields)


# --- pure rules ---------------------------------------------------------------

def test_missing_required_field_reports_full_list():
    error = check_required_fields(WorkerDraft(first_name="Anu"))
    assert isinstance(error, ValidationError)
    assert error.message == REQUIRED_FIELDS_MESSAGE


def test_zero_hourly_rate_counts_as_present():
    draft = _draft(uuid4(), hourly_rate=0)
    assert check_required_fields(draft) is None


def test_address_without_state_rejected():
    draft = _draft(uuid4(), address=AddressDraft(city="Kochi"))
    assert check_required_fields(draft).message == ADDRESS_REQUIRED_MESSAGE


def test_malformed_category_id():
    assert isinstance(check_category_identifier("12345"), ValidationError)
    assert check_category_identifier(str(uuid4())) is None


def test_numeric_bounds():
    assert check_numeric_bounds(-1, 0).field == "hourlyRate"
    assert check_numeric_bounds(10, -2).field == "experience"
    assert check_numeric_bounds(0, 0) is None


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_rejected(value):
    assert check_numeric_bounds(value, 0).field == "hourlyRate"
    assert check_numeric_bounds(10, value).field == "experience"


def test_phone_longer_than_column_rejected():
    error = check_field_formats(_draft(uuid4(), phone_number="+1 " + "5" * 40))
    assert error.field == "phoneNumber"
    assert error.message == "Phone number cannot exceed 32 characters"


@pytest.mark.parametrize("address, field", [
    (AddressDraft(city="K" * 121, state="Kerala"), "address.city"),
    (AddressDraft(city="Kochi", state="Kerala", zip_code="6" * 21), "address.zipCode"),
    (AddressDraft(city="Kochi", state="Kerala", street="s" * 256), "address.street"),
])
def test_address_parts_bounded(address, field):
    assert check_field_formats(_draft(uuid4(), address=address)).field == field


def test_email_longer_than_column_rejected():
    email = "a" * 250 + "@example.com"
    assert check_field_formats(_draft(uuid4(), email=email)).field == "email"


# --- registration chain -------------------------------------------------------

async def test_valid_registration_applies_defaults(categories, workers, active_category):
    validated = await validate_registration(
        _draft(active_category["id"]), categories, workers,
    )
    assert validated.email == "anu@example.com"
    assert validated.skills == []
    assert validated.experience == 0
    assert validated.availability == Availability.ON_DEMAND
    assert validated.country == "USA"
    assert validated.category_id == active_category["id"]


async def test_unknown_category_is_not_found(categories, workers):
    with pytest.raises(NotFoundError):
        await validate_registration(_draft(uuid4()), categories, workers)


async def test_inactive_category_is_conflict(categories, workers):
    inactive = categories.seed("Retired trade", is_active=False)
    with pytest.raises(ConflictError) as exc_info:
        await validate_registration(_draft(inactive["id"]), categories, workers)
    assert exc_info.value.message == "The selected category is not active"


async def test_malformed_category_is_validation_error(categories, workers):
    with pytest.raises(ValidationError):
        await validate_registration(_draft("not-an-id"), categories, workers)


async def test_email_taken_case_insensitively(categories, workers, active_category):
    await workers.insert({"email": "anu@example.com", "phone_number": "111"})
    with pytest.raises(ConflictError) as exc_info:
        await validate_registration(
            _draft(active_category["id"], email="ANU@EXAMPLE.COM"), categories, workers,
        )
    assert exc_info.value.field == "email"


async def test_phone_taken(categories, workers, active_category):
    await workers.insert({"email": "other@example.com", "phone_number": "+91 98765 43210"})
    with pytest.raises(ConflictError) as exc_info:
        await validate_registration(_draft(active_category["id"]), categories, workers)
    assert exc_info.value.field == "phoneNumber"


async def test_negative_rate_checked_after_uniqueness(categories, workers, active_category):
    await workers.insert({"email": "anu@example.com", "phone_number": "111"})
    with pytest.raises(ConflictError):
        await validate_registration(
            _draft(active_category["id"], hourly_rate=-5), categories, workers,
        )


async def test_negative_rate_rejected(categories, workers, active_category):
    with pytest.raises(ValidationError) as exc_info:
        await validate_registration(
            _draft(active_category["id"], hourly_rate=-5), categories, workers,
        )
    assert exc_info.value.message == "Hourly rate cannot be negative"


async def test_required_fields_win_over_bad_category(categories, workers):
    with pytest.raises(ValidationError) as exc_info:
        await validate_registration(
            _draft("not-an-id", email=None), categories, workers,
        )
    assert exc_info.value.message == REQUIRED_FIELDS_MESSAGE


async def test_invalid_email_format(categories, workers, active_category):
    with pytest.raises(ValidationError) as exc_info:
        await validate_registration(
            _draft(active_category["id"], email="anu-at-example"), categories, workers,
        )
    assert exc_info.value.field == "email"


# --- partial updates ----------------------------------------------------------

def test_update_cannot_blank_required_field():
    error = check_update_shape({"first_name": "  "})
    assert error.field == "firstName"


def test_update_rating_range():
    assert check_update_shape({"rating": 5.5}).field == "rating"
    assert check_update_shape({"rating": 5}) is None


def test_update_lengths_bounded():
    assert check_update_shape({"phone_number": "1" * 33}).field == "phoneNumber"
    error = check_update_shape({"address": {"city": "Kochi", "state": "S" * 121}})
    assert error.field == "address.state"


async def test_update_non_finite_rate_rejected(categories, workers):
    with pytest.raises(ValidationError):
        await validate_update(
            uuid4(), {"hourly_rate": float("nan")}, categories, workers,
        )


async def test_update_drops_immutable_fields_and_flattens_address(categories, workers):
    worker = await workers.insert({"email": "a@example.com", "phone_number": "1"})
    record = await validate_update(
        worker["id"],
        {
            "id": uuid4(), "created_at": None,
            "address": {"city": " Pune ", "state": "Maharashtra"},
            "availability": Availability.PART_TIME,
        },
        categories, workers,
    )
    assert "id" not in record and "created_at" not in record
    assert record["city"] == "Pune"
    assert record["country"] == "USA"
    assert record["availability"] == "part-time"


async def test_update_keeps_own_email(categories, workers):
    worker = await workers.insert({"email": "a@example.com", "phone_number": "1"})
    record = await validate_update(
        worker["id"], {"email": "A@example.com"}, categories, workers,
    )
    assert record["email"] == "a@example.com"


async def test_update_email_owned_by_other_worker(categories, workers):
    await workers.insert({"email": "taken@example.com", "phone_number": "1"})
    worker = await workers.insert({"email": "a@example.com", "phone_number": "2"})
    with pytest.raises(ConflictError):
        await validate_update(
            worker["id"], {"email": "taken@example.com"}, categories, workers,
        )


async def test_update_category_rechecked(categories, workers):
    inactive = categories.seed("Old", is_active=False)
    worker = await workers.insert({"email": "a@example.com", "phone_number": "1"})
    with pytest.raises(ConflictError):
        await validate_update(
            worker["id"], {"category": str(inactive["id"])}, categories, workers,
        )
