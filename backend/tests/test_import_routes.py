"""Endpoint tests for /api/v1/import, run against the SQLite test session."""
import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from treehouse.core.limiter import limiter
from treehouse.core.security import create_access_token
from treehouse.db.session import get_session
from treehouse.main import app

MEMBERS_CSV = b"firstName,lastName,email\nJohn,Doe,john@example.com\nJane,,jane@example.com\n"


# ─── Helpers ──────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture(autouse=True)
async def _app_overrides(db_session):
    async def _session():
        yield db_session

    app.dependency_overrides[get_session] = _session
    limiter.enabled = False
    yield
    limiter.enabled = True
    app.dependency_overrides.clear()


def _auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _upload(content: bytes = MEMBERS_CSV, name: str = "members.csv", content_type: str = "text/csv"):
    return {"file": (name, content, content_type)}


# ─── Auth ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_requires_token():
    async with _client() as client:
        response = await client.get("/api/v1/import/types")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_volunteer_is_forbidden(volunteer_user):
    async with _client() as client:
        response = await client.get("/api/v1/import/types", headers=_auth(volunteer_user))
    assert response.status_code == 403
    assert response.json()["detail"] == "Role 'volunteer' is not permitted for this action."


# ─── Types & templates ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_import_types(staff_user):
    async with _client() as client:
        response = await client.get("/api/v1/import/types", headers=_auth(staff_user))
    assert response.status_code == 200
    types = {t["import_type"]: t for t in response.json()}
    assert set(types) == {"members", "checkouts", "donations", "programs", "attendees"}
    assert types["members"]["required"] == ["firstName", "lastName", "email"]


@pytest.mark.asyncio
async def test_download_template(staff_user):
    async with _client() as client:
        response = await client.get("/api/v1/import/template/checkouts", headers=_auth(staff_user))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "checkouts_template.csv" in response.headers["content-disposition"]
    assert response.text.splitlines()[0] == "memberEmail,checkoutDate,numberOfBooks,genres,weight"


@pytest.mark.asyncio
async def test_download_unknown_template(staff_user):
    async with _client() as client:
        response = await client.get("/api/v1/import/template/metrics", headers=_auth(staff_user))
    assert response.status_code == 404
    assert response.json()["detail"] == "Template not found"


# ─── Preview & execute ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_preview(staff_user):
    async with _client() as client:
        response = await client.post(
            "/api/v1/import/preview",
            headers=_auth(staff_user),
            data={"import_type": "members"},
            files=_upload(),
        )
    assert response.status_code == 200
    body = response.json()
    assert body["file_name"] == "members.csv"
    assert (body["total_rows"], body["valid_rows"], body["invalid_rows"]) == (2, 1, 1)
    assert body["errors"][0]["row"] == 3
    assert body["columns"] == ["firstName", "lastName", "email"]


@pytest.mark.asyncio
async def test_preview_rejects_non_csv(staff_user):
    async with _client() as client:
        response = await client.post(
            "/api/v1/import/preview",
            headers=_auth(staff_user),
            data={"import_type": "members"},
            files=_upload(b"hello", "notes.txt", "text/plain"),
        )
    assert response.status_code == 400
    assert response.json()["detail"] == "Only CSV files are allowed"


@pytest.mark.asyncio
async def test_execute_then_rollback(staff_user):
    async with _client() as client:
        executed = await client.post(
            "/api/v1/import/execute",
            headers=_auth(staff_user),
            data={"import_type": "members"},
            files=_upload(),
        )
        assert executed.status_code == 201
        run = executed.json()
        assert run["status"] == "completed"
        assert run["stats"] == {"total_rows": 2, "successful": 1, "failed": 1, "skipped": 0}
        assert run["imported_by"] == str(staff_user.id)
        assert len(run["imported_records"]) == 1

        detail = await client.get(f"/api/v1/import/history/{run['id']}", headers=_auth(staff_user))
        assert detail.status_code == 200
        assert detail.json()["errors"][0]["error"] == "Missing required field: lastName"

        history = await client.get("/api/v1/import/history", headers=_auth(staff_user))
        assert history.json()["total"] == 1

        first = await client.post(f"/api/v1/import/rollback/{run['id']}", headers=_auth(staff_user))
        assert first.status_code == 200
        assert first.json() == {"deleted": 1, "errors": []}

        second = await client.post(f"/api/v1/import/rollback/{run['id']}", headers=_auth(staff_user))
        assert second.status_code == 409
        assert second.json()["detail"] == "Rollback failed: Import already rolled back"


@pytest.mark.asyncio
async def test_execute_unsupported_type(staff_user):
    async with _client() as client:
        response = await client.post(
            "/api/v1/import/execute",
            headers=_auth(staff_user),
            data={"import_type": "metrics"},
            files=_upload(),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Import failed: Unsupported import type: metrics"

        history = await client.get("/api/v1/import/history", headers=_auth(staff_user))
    assert history.json()["items"][0]["status"] == "failed"


@pytest.mark.asyncio
async def test_history_and_rollback_not_found(staff_user):
    missing = uuid.uuid4()
    async with _client() as client:
        detail = await client.get(f"/api/v1/import/history/{missing}", headers=_auth(staff_user))
        rollback = await client.post(f"/api/v1/import/rollback/{missing}", headers=_auth(staff_user))
    assert detail.status_code == 404
    assert rollback.status_code == 404
    assert rollback.json()["detail"] == "Import history not found"
