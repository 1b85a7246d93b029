"""DTOs for user profiles and bulk user operations (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from app.application.dtos.user_audit import Pagination, PerformerInfo

# Contact and address fields carried by imports and exports, in CSV column order.
PROFILE_CONTACT_FIELDS: tuple[str, ...] = (
    "contact_name",
    "contact_number",
    "company_name",
    "website",
    "street1",
    "street2",
    "city",
    "state",
    "zip",
)


@dataclass(frozen=True)
class ProfileResult:
    """Profile read-model used by bulk operations and audit snapshots."""

    id: str
    name: str | None
    email: str | None
    type: str
    status: str
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    deletion_reason: str | None = None
    contact_name: str | None = None
    contact_number: str | None = None
    company_name: str | None = None
    website: str | None = None
    street1: str | None = None
    street2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ProfileExportFilter:
    """Which profiles a user CSV export includes. None means no constraint."""

    user_ids: tuple[str, ...] | None = None
    status: str | None = None
    type: str | None = None
    include_deleted: bool = False


@dataclass(frozen=True)
class DeletedUserFilter:
    """Filters for the soft-deleted users listing (conjunctive)."""

    type: str | None = None
    status: str | None = None
    deleted_by: str | None = None
    deleted_after: datetime | None = None
    deleted_before: datetime | None = None
    # Case-insensitive substring of name, email, contact name or company name.
    search: str | None = None


@dataclass(frozen=True)
class DeletedUser:
    """A soft-deleted profile and the profile that deleted it, when known."""

    profile: ProfileResult
    deleted_by_user: PerformerInfo | None = None


@dataclass(frozen=True)
class DeletedUserPage:
    users: list[DeletedUser]
    pagination: Pagination


@dataclass(frozen=True)
class SoftDeleteResult:
    user_id: str
    deleted_at: datetime
    deleted_by: str | None
    deletion_reason: str | None


@dataclass(frozen=True)
class RestoreResult:
    user_id: str
    restored_at: datetime
    restored_by: str | None


@dataclass(frozen=True)
class BulkFailure:
    """One user a bulk operation could not change, and why."""

    id: str
    reason: str


@dataclass
class BulkOperationResult:
    """Outcome of a bulk user operation (per-user success or failure)."""

    success: list[str] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.success) + len(self.failed)

    @property
    def total_success(self) -> int:
        return len(self.success)

    @property
    def total_failed(self) -> int:
        return len(self.failed)


@dataclass(frozen=True)
class ImportFailure:
    """One CSV row a bulk import rejected. row is 1-based, header included."""

    row: int
    email: str
    reason: str


@dataclass
class BulkImportResult:
    """Outcome of a CSV user import: created profile ids and rejected rows."""

    success: list[str] = field(default_factory=list)
    failed: list[ImportFailure] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.success) + len(self.failed)

    @property
    def total_success(self) -> int:
        return len(self.success)

    @property
    def total_failed(self) -> int:
        return len(self.failed)
