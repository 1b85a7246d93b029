"""Application DTOs (no ORM dependency)."""

from app.application.dtos.user import (
    PROFILE_CONTACT_FIELDS,
    BulkFailure,
    BulkImportResult,
    BulkOperationResult,
    DeletedUser,
    DeletedUserFilter,
    DeletedUserPage,
    ImportFailure,
    ProfileExportFilter,
    ProfileResult,
    RestoreResult,
    SoftDeleteResult,
)
from app.application.dtos.user_audit import (
    AuditEntryCreate,
    AuditEntryResult,
    AuditLogFilter,
    AuditLogPage,
    AuditSummary,
    Pagination,
    PerformerInfo,
)

__all__ = [
    "AuditEntryCreate",
    "AuditEntryResult",
    "AuditLogFilter",
    "AuditLogPage",
    "AuditSummary",
    "BulkFailure",
    "BulkImportResult",
    "BulkOperationResult",
    "DeletedUser",
    "DeletedUserFilter",
    "DeletedUserPage",
    "ImportFailure",
    "PROFILE_CONTACT_FIELDS",
    "Pagination",
    "PerformerInfo",
    "ProfileExportFilter",
    "ProfileResult",
    "RestoreResult",
    "SoftDeleteResult",
]
