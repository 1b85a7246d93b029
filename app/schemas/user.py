"""User operation API schemas: bulk changes, import, soft delete and restore."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.application.dtos.user import (
    BulkImportResult,
    BulkOperationResult,
    DeletedUser,
    DeletedUserPage,
    RestoreResult,
    SoftDeleteResult,
)
from app.domain.enums import UserStatus, UserType
from app.schemas.user_audit import PaginationResponse, PerformerResponse


class BulkUserIdsRequest(BaseModel):
    """Request body naming the users a bulk operation applies to."""

    user_ids: list[str] = Field(..., min_length=1, max_length=500)


class BulkStatusChangeRequest(BulkUserIdsRequest):
    status: UserStatus
    reason: str | None = Field(default=None, max_length=1000)


class BulkRoleChangeRequest(BulkUserIdsRequest):
    new_role: UserType
    reason: str | None = Field(default=None, max_length=1000)


class BulkSoftDeleteRequest(BulkUserIdsRequest):
    reason: str | None = Field(default=None, max_length=1000)


class BulkRestoreRequest(BulkUserIdsRequest):
    pass


class BulkFailureResponse(BaseModel):
    id: str
    reason: str


class BulkOperationResponse(BaseModel):
    """Per-user outcome of a bulk operation."""

    success: list[str]
    failed: list[BulkFailureResponse]
    total_processed: int
    total_success: int
    total_failed: int

    @classmethod
    def from_result(cls, result: BulkOperationResult) -> "BulkOperationResponse":
        return cls(
            success=list(result.success),
            failed=[BulkFailureResponse(id=f.id, reason=f.reason) for f in result.failed],
            total_processed=result.total_processed,
            total_success=result.total_success,
            total_failed=result.total_failed,
        )


class BulkImportRequest(BaseModel):
    """CSV text: header line, then Email,Name,Type,Status,Contact Name,... per row."""

    csv_content: str = Field(..., min_length=1, max_length=2_000_000)


class ImportFailureResponse(BaseModel):
    row: int
    email: str
    reason: str


class BulkImportResponse(BaseModel):
    success: list[str]
    failed: list[ImportFailureResponse]
    total_processed: int
    total_success: int
    total_failed: int

    @classmethod
    def from_result(cls, result: BulkImportResult) -> "BulkImportResponse":
        return cls(
            success=list(result.success),
            failed=[
                ImportFailureResponse(row=f.row, email=f.email, reason=f.reason)
                for f in result.failed
            ],
            total_processed=result.total_processed,
            total_success=result.total_success,
            total_failed=result.total_failed,
        )


class SoftDeleteRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class SoftDeleteResponse(BaseModel):
    success: bool = True
    user_id: str
    deleted_at: datetime
    deleted_by: str | None
    deletion_reason: str | None
    message: str = "User soft deleted successfully"

    @classmethod
    def from_result(cls, result: SoftDeleteResult) -> "SoftDeleteResponse":
        return cls(
            user_id=result.user_id,
            deleted_at=result.deleted_at,
            deleted_by=result.deleted_by,
            deletion_reason=result.deletion_reason,
        )


class RestoreResponse(BaseModel):
    success: bool = True
    user_id: str
    restored_at: datetime
    restored_by: str | None
    message: str = "User restored successfully"

    @classmethod
    def from_result(cls, result: RestoreResult) -> "RestoreResponse":
        return cls(
            user_id=result.user_id,
            restored_at=result.restored_at,
            restored_by=result.restored_by,
        )


class DeletedUserResponse(BaseModel):
    """A soft-deleted profile; deleted_by_user is None when the deleter is unknown."""

    id: str
    name: str | None
    email: str | None
    type: str
    status: str
    contact_name: str | None
    contact_number: str | None
    company_name: str | None
    deleted_at: datetime | None
    deleted_by: str | None
    deletion_reason: str | None
    created_at: datetime | None
    deleted_by_user: PerformerResponse | None = None

    @classmethod
    def from_result(cls, item: DeletedUser) -> "DeletedUserResponse":
        p = item.profile
        deleter = item.deleted_by_user
        return cls(
            id=p.id,
            name=p.name,
            email=p.email,
            type=p.type,
            status=p.status,
            contact_name=p.contact_name,
            contact_number=p.contact_number,
            company_name=p.company_name,
            deleted_at=p.deleted_at,
            deleted_by=p.deleted_by,
            deletion_reason=p.deletion_reason,
            created_at=p.created_at,
            deleted_by_user=(
                PerformerResponse(
                    id=deleter.id, name=deleter.name, email=deleter.email, image=deleter.image
                )
                if deleter is not None
                else None
            ),
        )


class DeletedUserListResponse(BaseModel):
    users: list[DeletedUserResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: DeletedUserPage) -> "DeletedUserListResponse":
        p = page.pagination
        return cls(
            users=[DeletedUserResponse.from_result(u) for u in page.users],
            pagination=PaginationResponse(
                page=p.page,
                limit=p.limit,
                total_count=p.total_count,
                total_pages=p.total_pages,
                has_next_page=p.has_next_page,
                has_prev_page=p.has_prev_page,
            ),
        )
