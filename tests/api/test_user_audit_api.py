"""User audit endpoints over the in-memory store (dependency overrides)."""

import csv
import io
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_audit_query_service
from app.infrastructure.exceptions import PersistenceException
from app.main import app
from tests.fakes import InMemoryStore

T0 = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

pytestmark = pytest.mark.usefixtures("fake_app_services")


def _seed(store: InMemoryStore) -> None:
    store.add_profile("admin", name="Admin User", email="admin@test.com", type="ADMIN")
    store.add_entry(
        subject_id="u1",
        action="UPDATE",
        created_at=T0,
        performed_by="admin",
        changes={"before": {"name": "Old"}, "after": {"name": "New"}},
        reason="Profile update",
    )
    store.add_entry(subject_id="u1", action="UPDATE", created_at=T0 + timedelta(hours=1))
    store.add_entry(
        subject_id="u1",
        action="ROLE_CHANGE",
        created_at=T0 + timedelta(hours=2),
        performed_by="admin",
        changes={"before": {"type": "CLIENT"}, "after": {"type": "DRIVER"}},
    )


async def test_list_returns_entries_pagination_and_filters(
    client: AsyncClient, store: InMemoryStore
) -> None:
    _seed(store)
    response = await client.get("/api/v1/users/u1/audit", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert [e["action"] for e in data["entries"]] == ["ROLE_CHANGE", "UPDATE"]
    assert data["entries"][0]["performer"] == {
        "id": "admin",
        "name": "Admin User",
        "email": "admin@test.com",
        "image": None,
    }
    assert data["entries"][1]["performer"] is None
    assert data["pagination"] == {
        "page": 1,
        "limit": 2,
        "total_count": 3,
        "total_pages": 2,
        "has_next_page": True,
        "has_prev_page": False,
    }
    assert data["filters"]["available_actions"] == ["ROLE_CHANGE", "UPDATE"]


async def test_list_accepts_repeated_action_and_date_range(
    client: AsyncClient, store: InMemoryStore
) -> None:
    _seed(store)
    response = await client.get(
        "/api/v1/users/u1/audit",
        params=[
            ("action", "UPDATE"),
            ("action", "DELETE"),
            ("start_date", "2025-01-01T09:30:00Z"),
        ],
    )
    data = response.json()
    assert response.status_code == 200
    assert len(data["entries"]) == 1
    assert data["entries"][0]["created_at"].startswith("2025-01-01T10:00:00")
    assert data["filters"]["available_actions"] == ["ROLE_CHANGE", "UPDATE"]


async def test_list_rejects_malformed_dates(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users/u1/audit", params={"start_date": "yesterday"})
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_export_returns_csv_attachment(client: AsyncClient, store: InMemoryStore) -> None:
    _seed(store)
    response = await client.get("/api/v1/users/u1/audit/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="audit-log-u1-')
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][0] == "Timestamp"
    assert len(rows) == 4
    assert rows[3][1:8] == ["UPDATE", "Admin User", "admin@test.com", "name", "Old", "New", "Profile update"]


async def test_summary(client: AsyncClient, store: InMemoryStore) -> None:
    _seed(store)
    response = await client.get("/api/v1/users/u1/audit/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["total_entries"] == 3
    assert data["action_counts"] == {"UPDATE": 2, "ROLE_CHANGE": 1}
    assert data["last_action"] == "ROLE_CHANGE"
    assert data["last_activity_at"].startswith("2025-01-01T11:00:00")


async def test_persistence_failure_maps_to_503_without_details(client: AsyncClient) -> None:
    class FailingService:
        async def summary(self, subject_id: str):
            raise PersistenceException("user_audit.count_by_action", "connection refused")

    app.dependency_overrides[get_audit_query_service] = lambda: FailingService()
    response = await client.get("/api/v1/users/u1/audit/summary")

    assert response.status_code == 503
    body = response.json()
    assert body["error"] == "PERSISTENCE_ERROR"
    assert "details" not in body
