"""Bulk user operations: status change, role change, soft delete, restore,
CSV export and CSV import.

Each user is processed in its own transaction: the profile update and its
audit entry commit together or not at all. A failure for one user is
reported in the result and does not affect the others.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Awaitable, Callable, Iterable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.application.dtos.user import (
    PROFILE_CONTACT_FIELDS,
    BulkFailure,
    BulkImportResult,
    BulkOperationResult,
    ImportFailure,
    ProfileExportFilter,
    ProfileResult,
)
from app.application.interfaces.repositories import IProfileRepository
from app.application.services.audit_recorder import AuditRecorder
from app.domain.enums import UserStatus, UserType
from app.domain.exceptions import (
    AuditServiceException,
    UserModificationException,
    ValidationException,
)
from app.infrastructure.exceptions import PersistenceException
from app.shared.context import get_current_request_id
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[Any]]
ProfileRepositoryFactory = Callable[[Any], IProfileRepository]
_Operation = Callable[[Any, IProfileRepository, ProfileResult], Awaitable[None]]

USER_CSV_HEADERS: tuple[str, ...] = (
    "ID",
    "Name",
    "Email",
    "Type",
    "Status",
    "Contact Name",
    "Contact Number",
    "Company Name",
    "Website",
    "Street 1",
    "Street 2",
    "City",
    "State",
    "ZIP",
    "Created At",
    "Deleted At",
)
IMPORT_COLUMNS: tuple[str, ...] = ("email", "name", "type", "status", *PROFILE_CONTACT_FIELDS)
# SUPER_ADMIN accounts are never created by import.
IMPORTABLE_TYPES = frozenset(t.value for t in UserType if t is not UserType.SUPER_ADMIN)
IMPORTABLE_STATUSES = frozenset({UserStatus.ACTIVE.value, UserStatus.PENDING.value})
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _enum_value(enum_cls: type, value: Any, field: str) -> str:
    """Return the enum value for value or raise ValidationException."""
    try:
        return enum_cls(value).value
    except ValueError as e:
        raise ValidationException(f"Invalid {field}: {value!r}", field=field) from e


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    return str(value)


def parse_import_rows(csv_content: str) -> list[dict[str, str]]:
    """Data rows of an import CSV keyed by IMPORT_COLUMNS; blank lines and the header dropped."""
    rows = [
        row
        for row in csv.reader(io.StringIO(csv_content))
        if any(cell.strip() for cell in row)
    ]
    return [dict(zip(IMPORT_COLUMNS, (cell.strip() for cell in row))) for row in rows[1:]]


def _validate_import_row(row: dict[str, str]) -> str | None:
    """Return why row cannot be imported, or None."""
    email = row.get("email", "")
    if not email:
        return "Email is required"
    if not _EMAIL_RE.match(email):
        return "Invalid email format"
    if not row.get("type"):
        return "Type is required"
    if not row.get("status"):
        return "Status is required"
    return None


class UserBulkOperationsService:
    """Apply one change to many users, auditing each change in the same transaction."""

    def __init__(
        self,
        session_factory: SessionFactory,
        profile_repo_factory: ProfileRepositoryFactory,
        recorder: AuditRecorder,
    ) -> None:
        self._session_factory = session_factory
        self._profile_repo_factory = profile_repo_factory
        self._recorder = recorder

    @staticmethod
    def _metadata() -> dict[str, Any]:
        metadata: dict[str, Any] = {"bulk_operation": True}
        request_id = get_current_request_id()
        if request_id:
            metadata["request_id"] = request_id
        return metadata

    @staticmethod
    def _fail(
        result: BulkOperationResult,
        operation_name: str,
        user_id: str,
        error: AuditServiceException,
    ) -> None:
        logger.warning("Bulk %s skipped user %s: %s", operation_name, user_id, error.message)
        result.failed.append(BulkFailure(id=user_id, reason=error.message))

    async def _run(
        self,
        operation_name: str,
        user_ids: Iterable[str],
        operation: _Operation,
        *,
        protect_super_admin: bool = True,
    ) -> BulkOperationResult:
        """Run operation once per distinct user id, each in its own transaction."""
        result = BulkOperationResult()
        for user_id in dict.fromkeys(user_ids):
            try:
                async with self._session_factory() as session, session.begin():
                    profiles = self._profile_repo_factory(session)
                    user = await profiles.get_by_id(user_id)
                    if user is None:
                        raise UserModificationException(user_id, "User not found")
                    if protect_super_admin and user.type == UserType.SUPER_ADMIN.value:
                        raise UserModificationException(
                            user_id, "Cannot modify Super Admin users"
                        )
                    await operation(session, profiles, user)
            except AuditServiceException as e:
                self._fail(result, operation_name, user_id, e)
            except SQLAlchemyError as e:
                # Raised outside the repositories, e.g. by the commit on exit.
                op = "users.bulk_" + operation_name.replace(" ", "_")
                self._fail(result, operation_name, user_id, PersistenceException(op, str(e)))
            else:
                result.success.append(user_id)
        logger.info(
            "Bulk %s finished: %d succeeded, %d failed",
            operation_name,
            result.total_success,
            result.total_failed,
        )
        return result

    @traced("users.bulk_status_change")
    async def bulk_status_change(
        self,
        *,
        user_ids: Iterable[str],
        status: UserStatus | str,
        performed_by: str | None,
        reason: str | None = None,
    ) -> BulkOperationResult:
        """Set status on each user; STATUS_CHANGE audit per changed user."""
        new_status = _enum_value(UserStatus, status, "status")

        async def change(tx: Any, profiles: IProfileRepository, user: ProfileResult) -> None:
            if user.status == new_status:
                raise UserModificationException(user.id, "Status unchanged")
            await profiles.update_fields(user.id, status=new_status)
            await self._recorder.record(
                tx,
                subject_id=user.id,
                action=AuditAction.STATUS_CHANGE,
                performed_by=performed_by,
                before={"status": user.status},
                after={"status": new_status},
                reason=reason or f"Bulk status change to {new_status}",
                metadata=self._metadata(),
            )

        return await self._run("status change", user_ids, change)

    @traced("users.bulk_role_change")
    async def bulk_role_change(
        self,
        *,
        user_ids: Iterable[str],
        new_role: UserType | str,
        performed_by: str | None,
        reason: str | None = None,
    ) -> BulkOperationResult:
        """Set type (role) on each user; ROLE_CHANGE audit per changed user."""
        role = _enum_value(UserType, new_role, "new_role")

        async def change(tx: Any, profiles: IProfileRepository, user: ProfileResult) -> None:
            if user.type == role:
                raise UserModificationException(user.id, "Role unchanged")
            await profiles.update_fields(user.id, type=role)
            await self._recorder.record(
                tx,
                subject_id=user.id,
                action=AuditAction.ROLE_CHANGE,
                performed_by=performed_by,
                before={"type": user.type},
                after={"type": role},
                reason=reason or f"Bulk role change to {role}",
                metadata=self._metadata(),
            )

        return await self._run("role change", user_ids, change)

    @traced("users.bulk_soft_delete")
    async def bulk_soft_delete(
        self,
        *,
        user_ids: Iterable[str],
        performed_by: str | None,
        reason: str | None = None,
    ) -> BulkOperationResult:
        """Mark each user deleted (deleted_at/by/reason); SOFT_DELETE audit per user."""

        async def delete(tx: Any, profiles: IProfileRepository, user: ProfileResult) -> None:
            if user.deleted_at is not None:
                raise UserModificationException(user.id, "User already deleted")
            now = utc_now()
            await profiles.update_fields(
                user.id,
                deleted_at=now,
                deleted_by=performed_by,
                deletion_reason=reason,
            )
            await self._recorder.record(
                tx,
                subject_id=user.id,
                action=AuditAction.SOFT_DELETE,
                performed_by=performed_by,
                before={
                    "deleted_at": user.deleted_at,
                    "deleted_by": user.deleted_by,
                    "deletion_reason": user.deletion_reason,
                },
                after={
                    "deleted_at": now,
                    "deleted_by": performed_by,
                    "deletion_reason": reason,
                },
                reason=reason or "Bulk soft delete",
                metadata=self._metadata(),
            )

        return await self._run("soft delete", user_ids, delete)

    @traced("users.bulk_restore")
    async def bulk_restore(
        self,
        *,
        user_ids: Iterable[str],
        performed_by: str | None,
    ) -> BulkOperationResult:
        """Clear soft-delete fields on each deleted user; RESTORE audit per user."""

        async def restore(tx: Any, profiles: IProfileRepository, user: ProfileResult) -> None:
            if user.deleted_at is None:
                raise UserModificationException(user.id, "User is not deleted")
            await profiles.update_fields(
                user.id, deleted_at=None, deleted_by=None, deletion_reason=None
            )
            await self._recorder.record(
                tx,
                subject_id=user.id,
                action=AuditAction.RESTORE,
                performed_by=performed_by,
                before={
                    "deleted_at": user.deleted_at,
                    "deleted_by": user.deleted_by,
                    "deletion_reason": user.deletion_reason,
                },
                after={"deleted_at": None, "deleted_by": None, "deletion_reason": None},
                reason="Bulk restore",
                metadata=self._metadata(),
            )

        return await self._run("restore", user_ids, restore, protect_super_admin=False)

    @traced("users.export_csv")
    async def export_users_csv(
        self,
        *,
        user_ids: Iterable[str] | None = None,
        status: UserStatus | str | None = None,
        user_type: UserType | str | None = None,
        include_deleted: bool = False,
    ) -> str:
        """Return matching profiles as CSV (USER_CSV_HEADERS), newest created first."""
        filters = ProfileExportFilter(
            user_ids=tuple(user_ids) if user_ids else None,
            status=_enum_value(UserStatus, status, "status") if status else None,
            type=_enum_value(UserType, user_type, "type") if user_type else None,
            include_deleted=include_deleted,
        )
        async with self._session_factory() as session:
            users = await self._profile_repo_factory(session).list_for_export(filters)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(USER_CSV_HEADERS)
        for user in users:
            writer.writerow(
                [
                    _cell(value)
                    for value in (
                        user.id,
                        user.name,
                        user.email,
                        user.type,
                        user.status,
                        *(getattr(user, name) for name in PROFILE_CONTACT_FIELDS),
                        user.created_at,
                        user.deleted_at,
                    )
                ]
            )
        logger.info("Exported %d users to CSV", len(users))
        return buffer.getvalue()

    @traced("users.bulk_import")
    async def bulk_import_users(
        self,
        *,
        csv_content: str,
        performed_by: str | None,
    ) -> BulkImportResult:
        """Create one profile per CSV data row, each with a CREATE audit entry.

        Columns are positional (IMPORT_COLUMNS); the first non-blank line is
        the header. Each row commits in its own transaction, and rejected
        rows are reported with their 1-based line number.
        """
        result = BulkImportResult()
        for row_num, row in enumerate(parse_import_rows(csv_content), start=2):
            raw_email = row.get("email", "")
            invalid = _validate_import_row(row)
            if invalid is not None:
                self._fail_import(result, row_num, raw_email, invalid)
                continue
            email = raw_email.lower()
            user_type = row["type"].upper()
            if user_type not in IMPORTABLE_TYPES:
                self._fail_import(result, row_num, raw_email, f"Invalid type: {row['type']}")
                continue
            status = row["status"].upper()
            if status not in IMPORTABLE_STATUSES:
                self._fail_import(result, row_num, raw_email, f"Invalid status: {row['status']}")
                continue
            try:
                async with self._session_factory() as session, session.begin():
                    profiles = self._profile_repo_factory(session)
                    existing = await profiles.get_by_email(email)
                    if existing is not None:
                        raise ValidationException(
                            "User exists (deleted)"
                            if existing.deleted_at is not None
                            else "Email already exists",
                            field="email",
                        )
                    created = await profiles.create(
                        email=email,
                        name=row.get("name") or None,
                        type=user_type,
                        status=status,
                        **{name: row.get(name) or None for name in PROFILE_CONTACT_FIELDS},
                    )
                    await self._recorder.record(
                        session,
                        subject_id=created.id,
                        action=AuditAction.CREATE,
                        performed_by=performed_by,
                        after={"email": email, "type": user_type, "status": status},
                        reason="Bulk import from CSV",
                        metadata={**self._metadata(), "import_row": row_num},
                    )
            except AuditServiceException as e:
                self._fail_import(result, row_num, raw_email, e.message)
            except SQLAlchemyError as e:
                failure = PersistenceException("users.bulk_import", str(e))
                self._fail_import(result, row_num, raw_email, failure.message)
            else:
                result.success.append(created.id)
        logger.info(
            "Bulk import finished: %d created, %d rejected",
            result.total_success,
            result.total_failed,
        )
        return result

    @staticmethod
    def _fail_import(result: BulkImportResult, row: int, email: str, reason: str) -> None:
        logger.warning("Bulk import rejected row %d: %s", row, reason)
        result.failed.append(ImportFailure(row=row, email=email or "unknown", reason=reason))
