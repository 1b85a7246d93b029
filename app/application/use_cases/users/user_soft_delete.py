"""Single-user soft delete and restore, and the soft-deleted users listing.

Mutations run on the caller's transaction and record their audit entry on
it, so the profile change and its entry commit or roll back together.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from app.application.dtos.user import (
    DeletedUserFilter,
    DeletedUserPage,
    RestoreResult,
    SoftDeleteResult,
)
from app.application.dtos.user_audit import Pagination
from app.application.interfaces.repositories import IProfileRepository
from app.application.services.audit_recorder import AuditRecorder
from app.domain.enums import UserStatus, UserType
from app.domain.exceptions import (
    ResourceNotFoundException,
    UserModificationException,
    ValidationException,
)
from app.shared.context import get_current_request_id
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

ProfileRepositoryFactory = Callable[[Any], IProfileRepository]


def _metadata(operation: str, at: datetime) -> dict[str, Any]:
    metadata: dict[str, Any] = {"operation": operation, "timestamp": at.isoformat()}
    request_id = get_current_request_id()
    if request_id:
        metadata["request_id"] = request_id
    return metadata


class UserSoftDeleteService:
    """Soft delete, restore and list soft-deleted users."""

    def __init__(
        self,
        profile_repo_factory: ProfileRepositoryFactory,
        recorder: AuditRecorder,
        *,
        default_limit: int = 10,
        max_limit: int = 100,
    ) -> None:
        self._profile_repo_factory = profile_repo_factory
        self._recorder = recorder
        self._default_limit = default_limit
        self._max_limit = max_limit

    @traced("users.soft_delete")
    async def soft_delete_user(
        self,
        tx: Any,
        *,
        user_id: str,
        deleted_by: str | None,
        reason: str | None = None,
    ) -> SoftDeleteResult:
        """Mark one user deleted on tx and record a SOFT_DELETE entry.

        Raises:
            ResourceNotFoundException: No profile with user_id.
            UserModificationException: Already deleted, or a Super Admin.
        """
        profiles = self._profile_repo_factory(tx)
        user = await profiles.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        if user.deleted_at is not None:
            raise UserModificationException(user_id, "User is already soft deleted")
        if user.type == UserType.SUPER_ADMIN.value:
            raise UserModificationException(user_id, "Cannot modify Super Admin users")

        now = utc_now()
        updated = await profiles.update_fields(
            user_id, deleted_at=now, deleted_by=deleted_by, deletion_reason=reason
        )
        await self._recorder.record(
            tx,
            subject_id=user_id,
            action=AuditAction.SOFT_DELETE,
            performed_by=deleted_by,
            before={
                "deleted_at": user.deleted_at,
                "deleted_by": user.deleted_by,
                "deletion_reason": user.deletion_reason,
            },
            after={
                "deleted_at": now,
                "deleted_by": deleted_by,
                "deletion_reason": reason,
            },
            reason=reason or "User soft deleted",
            metadata=_metadata("soft_delete", now),
        )
        logger.info("Soft deleted user %s", user_id)
        return SoftDeleteResult(
            user_id=user_id,
            deleted_at=updated.deleted_at or now,
            deleted_by=updated.deleted_by,
            deletion_reason=updated.deletion_reason,
        )

    @traced("users.restore")
    async def restore_user(
        self,
        tx: Any,
        *,
        user_id: str,
        restored_by: str | None,
    ) -> RestoreResult:
        """Clear the soft-delete fields of one user on tx and record a RESTORE entry.

        Raises:
            ResourceNotFoundException: No profile with user_id.
            UserModificationException: The user is not soft deleted.
        """
        profiles = self._profile_repo_factory(tx)
        user = await profiles.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        if user.deleted_at is None:
            raise UserModificationException(user_id, "User is not soft deleted")

        now = utc_now()
        await profiles.update_fields(
            user_id, deleted_at=None, deleted_by=None, deletion_reason=None
        )
        await self._recorder.record(
            tx,
            subject_id=user_id,
            action=AuditAction.RESTORE,
            performed_by=restored_by,
            before={
                "deleted_at": user.deleted_at,
                "deleted_by": user.deleted_by,
                "deletion_reason": user.deletion_reason,
            },
            after={"deleted_at": None, "deleted_by": None, "deletion_reason": None},
            reason="User restored from soft delete",
            metadata=_metadata("restore", now),
        )
        logger.info("Restored user %s", user_id)
        return RestoreResult(user_id=user_id, restored_at=now, restored_by=restored_by)

    @traced("users.list_deleted")
    async def get_deleted_users(
        self,
        db: Any,
        *,
        page: int = 1,
        limit: int | None = None,
        user_type: UserType | str | None = None,
        status: UserStatus | str | None = None,
        deleted_by: str | None = None,
        deleted_after: datetime | None = None,
        deleted_before: datetime | None = None,
        search: str | None = None,
    ) -> DeletedUserPage:
        """Return one page of soft-deleted users, most recently deleted first."""
        page = page if page and page > 0 else 1
        limit = min(limit if limit and limit > 0 else self._default_limit, self._max_limit)
        try:
            filters = DeletedUserFilter(
                type=UserType(user_type).value if user_type else None,
                status=UserStatus(status).value if status else None,
                deleted_by=deleted_by,
                deleted_after=deleted_after,
                deleted_before=deleted_before,
                search=search.strip() if search and search.strip() else None,
            )
        except ValueError as e:
            raise ValidationException(str(e)) from e

        profiles = self._profile_repo_factory(db)
        total_count = await profiles.count_deleted(filters)
        pagination = Pagination.build(page, limit, total_count)
        users = []
        if pagination.offset < total_count:
            users = await profiles.list_deleted(filters, skip=pagination.offset, limit=limit)
        return DeletedUserPage(users=users, pagination=pagination)
