"""UserBulkOperationsService: per-user transactions, guards, and audit entries."""

import pytest

from app.application.use_cases.users import UserBulkOperationsService
from app.domain.enums import UserStatus, UserType
from app.domain.exceptions import ValidationException
from app.shared.context import set_current_actor
from tests.fakes import FIXED_NOW, InMemoryStore


def _entries(store: InMemoryStore) -> list:
    return [e for _, e in store.entries]


class TestBulkStatusChange:
    async def test_changes_status_and_records_audit(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1", status="PENDING")
        store.add_profile("u2", status="PENDING")

        result = await bulk_service.bulk_status_change(
            user_ids=["u1", "u2"], status=UserStatus.ACTIVE, performed_by="admin"
        )

        assert result.success == ["u1", "u2"]
        assert result.total_failed == 0
        assert store.profiles["u1"].status == "ACTIVE"
        entries = _entries(store)
        assert [e.subject_id for e in entries] == ["u1", "u2"]
        assert entries[0].action == "STATUS_CHANGE"
        assert entries[0].performed_by == "admin"
        assert entries[0].changes == {"before": {"status": "PENDING"}, "after": {"status": "ACTIVE"}}
        assert entries[0].reason == "Bulk status change to ACTIVE"
        assert entries[0].metadata == {"bulk_operation": True}

    async def test_per_user_failures_do_not_stop_the_batch(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("ok", status="PENDING")
        store.add_profile("same", status="ACTIVE")
        store.add_profile("boss", status="PENDING", type="SUPER_ADMIN")

        result = await bulk_service.bulk_status_change(
            user_ids=["missing", "ok", "same", "boss"],
            status="ACTIVE",
            performed_by="admin",
            reason="Approved",
        )

        assert result.success == ["ok"]
        assert {(f.id, f.reason) for f in result.failed} == {
            ("missing", "User not found"),
            ("same", "Status unchanged"),
            ("boss", "Cannot modify Super Admin users"),
        }
        assert result.total_processed == 4
        assert [e.subject_id for e in _entries(store)] == ["ok"]
        assert _entries(store)[0].reason == "Approved"

    async def test_invalid_status_is_rejected(
        self, bulk_service: UserBulkOperationsService
    ) -> None:
        with pytest.raises(ValidationException):
            await bulk_service.bulk_status_change(
                user_ids=["u1"], status="ARCHIVED", performed_by="admin"
            )

    async def test_duplicate_ids_are_processed_once(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1", status="PENDING")
        result = await bulk_service.bulk_status_change(
            user_ids=["u1", "u1"], status="ACTIVE", performed_by="admin"
        )
        assert result.success == ["u1"]
        assert result.total_processed == 1

    async def test_audit_failure_rolls_back_the_users_change(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1", status="PENDING")
        store.fail_audit_writes = True

        result = await bulk_service.bulk_status_change(
            user_ids=["u1"], status="ACTIVE", performed_by="admin"
        )

        assert result.success == []
        assert result.failed[0].id == "u1"
        assert store.profiles["u1"].status == "PENDING"
        assert store.entries == []

    async def test_commit_failure_is_reported_and_batch_continues(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1", status="PENDING")
        store.add_profile("u2", status="PENDING")
        store.failing_commits = 1

        result = await bulk_service.bulk_status_change(
            user_ids=["u1", "u2"], status="ACTIVE", performed_by="admin"
        )

        assert result.success == ["u2"]
        assert result.failed[0].id == "u1"
        assert result.failed[0].reason == "Database operation failed: users.bulk_status_change"
        assert store.profiles["u1"].status == "PENDING"
        assert store.profiles["u2"].status == "ACTIVE"
        assert [e.subject_id for e in _entries(store)] == ["u2"]

    async def test_request_id_is_added_to_metadata(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1", status="PENDING")
        set_current_actor("admin", request_id="req-123")
        await bulk_service.bulk_status_change(
            user_ids=["u1"], status="ACTIVE", performed_by="admin"
        )
        assert _entries(store)[0].metadata == {"bulk_operation": True, "request_id": "req-123"}


class TestBulkRoleChange:
    async def test_changes_type(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1", type="CLIENT")
        store.add_profile("u2", type="DRIVER")

        result = await bulk_service.bulk_role_change(
            user_ids=["u1", "u2"], new_role=UserType.DRIVER, performed_by="admin"
        )

        assert result.success == ["u1"]
        assert result.failed[0].reason == "Role unchanged"
        assert store.profiles["u1"].type == "DRIVER"
        entry = _entries(store)[0]
        assert entry.action == "ROLE_CHANGE"
        assert entry.changes == {"before": {"type": "CLIENT"}, "after": {"type": "DRIVER"}}
        assert entry.reason == "Bulk role change to DRIVER"

    async def test_invalid_role_is_rejected(
        self, bulk_service: UserBulkOperationsService
    ) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await bulk_service.bulk_role_change(
                user_ids=["u1"], new_role="OWNER", performed_by="admin"
            )
        assert exc_info.value.details == {"field": "new_role"}


class TestBulkSoftDeleteAndRestore:
    async def test_soft_delete_sets_deletion_fields(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1")

        result = await bulk_service.bulk_soft_delete(
            user_ids=["u1"], performed_by="admin", reason="Spam account"
        )

        assert result.success == ["u1"]
        profile = store.profiles["u1"]
        assert profile.deleted_at is not None
        assert profile.deleted_by == "admin"
        assert profile.deletion_reason == "Spam account"
        entry = _entries(store)[0]
        assert entry.action == "SOFT_DELETE"
        assert entry.reason == "Spam account"
        assert entry.changes["before"] == {
            "deleted_at": None,
            "deleted_by": None,
            "deletion_reason": None,
        }
        assert entry.changes["after"]["deleted_by"] == "admin"

    async def test_soft_delete_default_reason_and_guards(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("u1")
        store.add_profile("gone", deleted_at=FIXED_NOW, deleted_by="x")
        store.add_profile("boss", type="SUPER_ADMIN")

        result = await bulk_service.bulk_soft_delete(
            user_ids=["u1", "gone", "boss"], performed_by=None
        )

        assert result.success == ["u1"]
        assert {(f.id, f.reason) for f in result.failed} == {
            ("gone", "User already deleted"),
            ("boss", "Cannot modify Super Admin users"),
        }
        entry = _entries(store)[0]
        assert entry.reason == "Bulk soft delete"
        assert entry.performed_by is None

    async def test_restore_clears_deletion_fields(
        self, store: InMemoryStore, bulk_service: UserBulkOperationsService
    ) -> None:
        store.add_profile("gone", deleted_at=FIXED_NOW, deleted_by="x", deletion_reason="old")
        store.add_profile("alive")
        store.add_profile("boss", type="SUPER_ADMIN", deleted_at=FIXED_NOW)

        result = await bulk_service.bulk_restore(
            user_ids=["gone", "alive", "boss"], performed_by="admin"
        )

        assert result.success == ["gone", "boss"]
        assert result.failed[0].id == "alive"
        assert result.failed[0].reason == "User is not deleted"
        assert store.profiles["gone"].deleted_at is None
        assert store.profiles["gone"].deletion_reason is None
        entry = _entries(store)[0]
        assert entry.action == "RESTORE"
        assert entry.reason == "Bulk restore"
        assert entry.changes["before"]["deletion_reason"] == "old"
        assert entry.changes["after"] == {
            "deleted_at": None,
            "deleted_by": None,
            "deletion_reason": None,
        }
