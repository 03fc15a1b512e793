"""Worker Routes — end-to-end HTTP behavior over in-memory SQLite.

Invariants:
    - POST /workers returns 201 with camelCase worker and defaults applied
    - Rule violations map to 400 / 404 / 409 with the failure envelope
    - Listing paginates with currentPage/totalPages/totalWorkers/hasNext/hasPrev
    - Confirmation is sent in the background via the best channel
    - PUT/DELETE need a caller identity: 401 without, 403 when not allowed
    - Non-finite or over-long values are 400, never a storage error
"""

import json
from uuid import uuid4

import pytest

from crewdesk.infrastructure.repositories import SqlCategoryRepository, SqlWorkerRepository
from crewdesk.services.notification_dispatcher import registration_confirmation_text


ADMIN_HEADERS = {"X-User-Id": str(uuid4()), "X-User-Role": "admin"}


def _caller(user_id=None, role: str = "worker") -> dict:
    return {"X-User-Id": str(user_id or uuid4()), "X-User-Role": role}


def _payload(category_id, **overrides) -> dict:
    body = {
        "firstName": "Anu",
        "lastName": "Raj",
        "email": "anu.raj@example.com",
        "phoneNumber": "+91 98765 43210",
        "address": {"city": "Kochi", "state": "Kerala"},
        "category": str(category_id),
        "hourlyRate": 200,
    }
    body.update(overrides)
    return body


@pytest.fixture
async def seed_workers(test_db, seed_category):
    repo = SqlWorkerRepository(test_db)
    created = []
    for i in range(12):
        created.append(await repo.insert({
            "first_name": f"Worker{i}", "last_name": "Test",
            "email": f"worker{i}@example.com", "phone_number": f"+1 555 01{i:02d}",
            "city": "Kochi" if i % 2 else "Chennai", "state": "Kerala",
            "country": "India", "category_id": seed_category["id"],
            "skills": [], "experience": i, "hourly_rate": 100 + i,
            "availability": "full-time" if i < 4 else "on-demand",
            "rating": i / 3,
        }))
    return created


# --- registration -------------------------------------------------------------

async def test_register_example_worker(client, seed_category, channels, dispatcher):
    res = await client.post("/api/v1/workers", json=_payload(seed_category["id"]))

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    worker = body["data"]["worker"]
    assert worker["fullName"] == "Anu Raj"
    assert worker["availability"] == "on-demand"
    assert worker["experience"] == 0
    assert worker["skills"] == []
    assert worker["status"] == "pending"
    assert worker["address"] == {
        "street": None, "city": "Kochi", "state": "Kerala",
        "zipCode": None, "country": "USA",
    }
    assert worker["category"]["name"] == "Electrician"

    await dispatcher.drain()
    whatsapp, sms = channels
    assert whatsapp.calls == [("+91 98765 43210", registration_confirmation_text("Anu"))]
    assert sms.calls == []


async def test_register_missing_fields(client, seed_category):
    res = await client.post("/api/v1/workers", json={"firstName": "Anu"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["message"].startswith("Please provide all required fields")
    assert body["error"]["code"] == "VALIDATION_ERROR"


async def test_register_unknown_category(client):
    res = await client.post("/api/v1/workers", json=_payload(uuid4()))
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_register_inactive_category(client, test_db):
    inactive = await SqlCategoryRepository(test_db).insert(
        {"name": "Retired", "is_active": False},
    )
    res = await client.post("/api/v1/workers", json=_payload(inactive["id"]))
    assert res.status_code == 409


async def test_register_duplicate_email_case_insensitive(client, seed_category):
    first = await client.post("/api/v1/workers", json=_payload(seed_category["id"]))
    assert first.status_code == 201

    second = await client.post("/api/v1/workers", json=_payload(
        seed_category["id"], email="ANU.RAJ@example.com", phoneNumber="+1 555 0199",
    ))
    assert second.status_code == 409
    assert second.json()["message"] == "Worker with this email already exists"

    listing = await client.get("/api/v1/workers")
    assert listing.json()["data"]["pagination"]["totalWorkers"] == 1


async def test_register_uncoercible_rate_is_400(client, seed_category):
    res = await client.post(
        "/api/v1/workers", json=_payload(seed_category["id"], hourlyRate="lots"),
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid request data"


async def test_register_succeeds_when_all_channels_fail(client, seed_category, channels):
    for channel in channels:
        channel.outcome = False
    res = await client.post("/api/v1/workers", json=_payload(seed_category["id"]))
    assert res.status_code == 201


# --- listing ------------------------------------------------------------------

async def test_list_default_page(client, seed_workers):
    res = await client.get("/api/v1/workers")
    assert res.status_code == 200
    data = res.json()["data"]
    assert len(data["workers"]) == 10
    assert data["pagination"] == {
        "currentPage": 1, "totalPages": 2, "totalWorkers": 12,
        "hasNextPage": True, "hasPrevPage": False,
    }


async def test_list_second_page_is_remainder(client, seed_workers):
    first = (await client.get("/api/v1/workers?page=1&limit=10")).json()["data"]
    second = (await client.get("/api/v1/workers?page=2&limit=10")).json()["data"]
    ids = {w["id"] for w in first["workers"]} | {w["id"] for w in second["workers"]}
    assert len(second["workers"]) == 2
    assert len(ids) == 12
    assert second["pagination"]["hasPrevPage"] is True
    assert second["pagination"]["hasNextPage"] is False


async def test_list_filters(client, seed_workers):
    res = await client.get("/api/v1/workers?city=koc&availability=on-demand&minRating=2")
    workers = res.json()["data"]["workers"]
    assert workers
    for worker in workers:
        assert worker["address"]["city"] == "Kochi"
        assert worker["availability"] == "on-demand"
        assert worker["rating"] >= 2


async def test_list_search_phone_only(client, seed_workers):
    res = await client.get("/api/v1/workers", params={"search": "555 0107"})
    workers = res.json()["data"]["workers"]
    assert [w["firstName"] for w in workers] == ["Worker7"]


async def test_list_malformed_category(client):
    res = await client.get("/api/v1/workers?category=abc")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_IDENTIFIER"


async def test_list_rejects_page_zero(client):
    res = await client.get("/api/v1/workers?page=0")
    assert res.status_code == 400


async def test_list_rejects_oversized_limit(client):
    res = await client.get("/api/v1/workers?limit=1000")
    assert res.status_code == 400


# --- get / update / delete ----------------------------------------------------

async def test_get_worker(client, seed_workers):
    worker_id = seed_workers[0]["id"]
    res = await client.get(f"/api/v1/workers/{worker_id}")
    assert res.status_code == 200
    assert res.json()["data"]["worker"]["email"] == "worker0@example.com"


async def test_get_worker_bad_id(client):
    res = await client.get("/api/v1/workers/not-an-id")
    assert res.status_code == 400


async def test_get_worker_missing(client):
    res = await client.get(f"/api/v1/workers/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["message"] == "Worker not found"


async def test_update_worker_partial(client, seed_workers):
    worker = seed_workers[0]
    res = await client.put(
        f"/api/v1/workers/{worker['id']}",
        json={"hourlyRate": 300, "status": "approved", "isVerified": True},
        headers=ADMIN_HEADERS,
    )
    assert res.status_code == 200
    updated = res.json()["data"]["worker"]
    assert updated["hourlyRate"] == 300
    assert updated["status"] == "approved"
    assert updated["isVerified"] is True
    assert updated["email"] == worker["email"]


async def test_update_worker_email_conflict(client, seed_workers):
    res = await client.put(
        f"/api/v1/workers/{seed_workers[0]['id']}",
        json={"email": seed_workers[1]["email"]},
        headers=ADMIN_HEADERS,
    )
    assert res.status_code == 409


async def test_update_worker_cannot_clear_required(client, seed_workers):
    res = await client.put(
        f"/api/v1/workers/{seed_workers[0]['id']}", json={"firstName": ""},
        headers=ADMIN_HEADERS,
    )
    assert res.status_code == 400


async def test_delete_worker(client, seed_workers):
    worker_id = seed_workers[0]["id"]
    res = await client.delete(f"/api/v1/workers/{worker_id}", headers=ADMIN_HEADERS)
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Worker deleted successfully"}

    res = await client.get(f"/api/v1/workers/{worker_id}")
    assert res.status_code == 404


# --- caller identity ----------------------------------------------------------

async def test_anonymous_delete_is_401(client, seed_workers):
    worker_id = seed_workers[0]["id"]
    res = await client.delete(f"/api/v1/workers/{worker_id}")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"

    res = await client.get(f"/api/v1/workers/{worker_id}")
    assert res.status_code == 200


async def test_non_admin_delete_is_403(client, seed_workers):
    worker_id = seed_workers[0]["id"]
    res = await client.delete(f"/api/v1/workers/{worker_id}", headers=_caller())
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_anonymous_update_is_401(client, seed_workers):
    res = await client.put(
        f"/api/v1/workers/{seed_workers[0]['id']}", json={"hourlyRate": 1},
    )
    assert res.status_code == 401


@pytest.mark.parametrize("headers", [
    {"X-User-Id": "not-a-uuid", "X-User-Role": "admin"},
    {"X-User-Id": str(uuid4()), "X-User-Role": "superuser"},
])
async def test_unreadable_identity_is_401(client, seed_workers, headers):
    res = await client.delete(
        f"/api/v1/workers/{seed_workers[0]['id']}", headers=headers,
    )
    assert res.status_code == 401


async def test_linked_user_updates_own_profile(client, test_db, seed_category):
    owner_id = uuid4()
    worker = await SqlWorkerRepository(test_db).insert({
        "first_name": "Own", "last_name": "Er", "email": "owner@example.com",
        "phone_number": "+1 555 0300", "city": "Kochi", "state": "Kerala",
        "country": "India", "category_id": seed_category["id"], "skills": [],
        "experience": 2, "hourly_rate": 90, "availability": "part-time",
        "user_id": owner_id,
    })
    url = f"/api/v1/workers/{worker['id']}"

    res = await client.put(url, json={"hourlyRate": 120}, headers=_caller(owner_id))
    assert res.status_code == 200
    assert res.json()["data"]["worker"]["hourlyRate"] == 120

    res = await client.put(url, json={"hourlyRate": 1}, headers=_caller())
    assert res.status_code == 403

    res = await client.put(url, json={"status": "approved"}, headers=_caller(owner_id))
    assert res.status_code == 403
    assert res.json()["error"]["field"] == "status"


# --- storage-bound input ------------------------------------------------------

@pytest.mark.parametrize("value", [float("nan"), float("inf")])
async def test_register_non_finite_rate_is_400(client, seed_category, value):
    # stdlib json writes NaN / Infinity literals, as a careless client would
    body = json.dumps(_payload(seed_category["id"], hourlyRate=value))
    res = await client.post(
        "/api/v1/workers", content=body,
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_register_oversized_phone_is_400(client, seed_category):
    res = await client.post("/api/v1/workers", json=_payload(
        seed_category["id"], phoneNumber="+1 " + "5" * 40,
    ))
    assert res.status_code == 400
    assert res.json()["error"]["field"] == "phoneNumber"


async def test_list_rejects_nan_min_rating(client):
    res = await client.get("/api/v1/workers?minRating=nan")
    assert res.status_code == 400
