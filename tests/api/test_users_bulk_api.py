"""Bulk user endpoints: actor from header, per-user results, audit entries written."""

import pytest
from httpx import AsyncClient

from tests.fakes import InMemoryStore

pytestmark = pytest.mark.usefixtures("fake_app_services")


async def test_bulk_status_uses_actor_header(client: AsyncClient, store: InMemoryStore) -> None:
    store.add_profile("u1", status="PENDING")
    store.add_profile("boss", status="PENDING", type="SUPER_ADMIN")

    response = await client.post(
        "/api/v1/users/bulk/status",
        json={"user_ids": ["u1", "boss"], "status": "ACTIVE", "reason": "Approved"},
        headers={"X-Actor-ID": "admin", "X-Request-ID": "req-42"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": ["u1"],
        "failed": [{"id": "boss", "reason": "Cannot modify Super Admin users"}],
        "total_processed": 2,
        "total_success": 1,
        "total_failed": 1,
    }
    (_, entry), = store.entries
    assert entry.performed_by == "admin"
    assert entry.metadata == {"bulk_operation": True, "request_id": "req-42"}


async def test_bulk_delete_without_actor_is_system(client: AsyncClient, store: InMemoryStore) -> None:
    store.add_profile("u1")
    response = await client.post("/api/v1/users/bulk/delete", json={"user_ids": ["u1"]})

    assert response.status_code == 200
    assert response.json()["success"] == ["u1"]
    (_, entry), = store.entries
    assert entry.performed_by is None
    assert entry.action == "SOFT_DELETE"


async def test_bulk_role_and_restore(client: AsyncClient, store: InMemoryStore) -> None:
    store.add_profile("u1", type="CLIENT")
    headers = {"X-Actor-ID": "admin"}

    role = await client.post(
        "/api/v1/users/bulk/role", json={"user_ids": ["u1"], "new_role": "VENDOR"}, headers=headers
    )
    await client.post("/api/v1/users/bulk/delete", json={"user_ids": ["u1"]}, headers=headers)
    restore = await client.post(
        "/api/v1/users/bulk/restore", json={"user_ids": ["u1"]}, headers=headers
    )

    assert role.json()["success"] == ["u1"]
    assert restore.json()["success"] == ["u1"]
    assert [e.action for _, e in store.entries] == ["ROLE_CHANGE", "SOFT_DELETE", "RESTORE"]
    assert store.profiles["u1"].deleted_at is None


@pytest.mark.parametrize(
    "path,body",
    [
        ("/api/v1/users/bulk/status", {"user_ids": ["u1"], "status": "ARCHIVED"}),
        ("/api/v1/users/bulk/role", {"user_ids": ["u1"], "new_role": "OWNER"}),
        ("/api/v1/users/bulk/delete", {"user_ids": []}),
    ],
)
async def test_invalid_bodies_are_rejected(client: AsyncClient, path: str, body: dict) -> None:
    response = await client.post(path, json=body)
    assert response.status_code == 422
