"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse
from app.schemas.user import (
    BulkFailureResponse,
    BulkImportRequest,
    BulkImportResponse,
    BulkOperationResponse,
    BulkRestoreRequest,
    BulkRoleChangeRequest,
    BulkSoftDeleteRequest,
    BulkStatusChangeRequest,
    DeletedUserListResponse,
    DeletedUserResponse,
    ImportFailureResponse,
    RestoreResponse,
    SoftDeleteRequest,
    SoftDeleteResponse,
)
from app.schemas.user_audit import (
    PaginationResponse,
    PerformerResponse,
    UserAuditEntryResponse,
    UserAuditListResponse,
    UserAuditSummaryResponse,
)

__all__ = [
    "BulkFailureResponse",
    "BulkImportRequest",
    "BulkImportResponse",
    "BulkOperationResponse",
    "BulkRestoreRequest",
    "BulkRoleChangeRequest",
    "BulkSoftDeleteRequest",
    "BulkStatusChangeRequest",
    "DeletedUserListResponse",
    "DeletedUserResponse",
    "HealthResponse",
    "ImportFailureResponse",
    "PaginationResponse",
    "PerformerResponse",
    "RestoreResponse",
    "SoftDeleteRequest",
    "SoftDeleteResponse",
    "UserAuditEntryResponse",
    "UserAuditListResponse",
    "UserAuditSummaryResponse",
]
