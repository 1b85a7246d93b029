"""User operations: bulk changes, CSV import/export, soft delete and restore.

Every mutation is audited in the transaction that performs it.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import (
    get_actor_id,
    get_bulk_operations_service,
    get_db,
    get_db_transactional,
    get_soft_delete_service,
)
from app.application.use_cases.users import UserBulkOperationsService, UserSoftDeleteService
from app.domain.enums import UserStatus, UserType
from app.schemas.user import (
    BulkImportRequest,
    BulkImportResponse,
    BulkOperationResponse,
    BulkRestoreRequest,
    BulkRoleChangeRequest,
    BulkSoftDeleteRequest,
    BulkStatusChangeRequest,
    DeletedUserListResponse,
    RestoreResponse,
    SoftDeleteRequest,
    SoftDeleteResponse,
)
from app.shared.utils.datetime import ensure_utc, utc_now

router = APIRouter()


@router.post("/bulk/status", response_model=BulkOperationResponse)
async def bulk_status_change(
    body: BulkStatusChangeRequest,
    service: Annotated[UserBulkOperationsService, Depends(get_bulk_operations_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> BulkOperationResponse:
    """Set status on each user; per-user failures are reported, not raised."""
    result = await service.bulk_status_change(
        user_ids=body.user_ids,
        status=body.status,
        performed_by=actor_id,
        reason=body.reason,
    )
    return BulkOperationResponse.from_result(result)


@router.post("/bulk/role", response_model=BulkOperationResponse)
async def bulk_role_change(
    body: BulkRoleChangeRequest,
    service: Annotated[UserBulkOperationsService, Depends(get_bulk_operations_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> BulkOperationResponse:
    """Set role (user type) on each user."""
    result = await service.bulk_role_change(
        user_ids=body.user_ids,
        new_role=body.new_role,
        performed_by=actor_id,
        reason=body.reason,
    )
    return BulkOperationResponse.from_result(result)


@router.post("/bulk/delete", response_model=BulkOperationResponse)
async def bulk_soft_delete(
    body: BulkSoftDeleteRequest,
    service: Annotated[UserBulkOperationsService, Depends(get_bulk_operations_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> BulkOperationResponse:
    """Soft delete each user."""
    result = await service.bulk_soft_delete(
        user_ids=body.user_ids,
        performed_by=actor_id,
        reason=body.reason,
    )
    return BulkOperationResponse.from_result(result)


@router.post("/bulk/restore", response_model=BulkOperationResponse)
async def bulk_restore(
    body: BulkRestoreRequest,
    service: Annotated[UserBulkOperationsService, Depends(get_bulk_operations_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> BulkOperationResponse:
    """Restore each soft-deleted user."""
    result = await service.bulk_restore(user_ids=body.user_ids, performed_by=actor_id)
    return BulkOperationResponse.from_result(result)


@router.post("/bulk/import", response_model=BulkImportResponse)
async def bulk_import(
    body: BulkImportRequest,
    service: Annotated[UserBulkOperationsService, Depends(get_bulk_operations_service)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> BulkImportResponse:
    """Create users from CSV rows; rejected rows are reported with their line number."""
    result = await service.bulk_import_users(csv_content=body.csv_content, performed_by=actor_id)
    return BulkImportResponse.from_result(result)


@router.get("/export")
async def export_users(
    service: Annotated[UserBulkOperationsService, Depends(get_bulk_operations_service)],
    user_ids: list[str] | None = Query(None, description="Only these users (repeatable)"),
    status: UserStatus | None = Query(None),
    type: UserType | None = Query(None),
    include_deleted: bool = Query(False),
) -> Response:
    """Download matching users as CSV, newest created first."""
    content = await service.export_users_csv(
        user_ids=user_ids,
        status=status,
        user_type=type,
        include_deleted=include_deleted,
    )
    filename = f"users-export-{utc_now().date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/deleted", response_model=DeletedUserListResponse)
async def list_deleted_users(
    service: Annotated[UserSoftDeleteService, Depends(get_soft_delete_service)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, description="Page number (1-based)"),
    limit: int | None = Query(None, description="Page size (default 10)"),
    type: UserType | None = Query(None),
    status: UserStatus | None = Query(None),
    deleted_by: str | None = Query(None),
    deleted_after: datetime | None = Query(None, description="From (inclusive) ISO8601"),
    deleted_before: datetime | None = Query(None, description="To (inclusive) ISO8601"),
    search: str | None = Query(None, max_length=200),
) -> DeletedUserListResponse:
    """List soft-deleted users, most recently deleted first."""
    result = await service.get_deleted_users(
        db,
        page=page,
        limit=limit,
        user_type=type,
        status=status,
        deleted_by=deleted_by,
        deleted_after=ensure_utc(deleted_after),
        deleted_before=ensure_utc(deleted_before),
        search=search,
    )
    return DeletedUserListResponse.from_page(result)


@router.post("/{user_id}/soft-delete", response_model=SoftDeleteResponse)
async def soft_delete_user(
    user_id: str,
    service: Annotated[UserSoftDeleteService, Depends(get_soft_delete_service)],
    tx: Annotated[AsyncSession, Depends(get_db_transactional)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
    body: SoftDeleteRequest | None = None,
) -> SoftDeleteResponse:
    """Soft delete one user; 404 if missing, 409 if already deleted or protected."""
    result = await service.soft_delete_user(
        tx,
        user_id=user_id,
        deleted_by=actor_id,
        reason=body.reason if body else None,
    )
    return SoftDeleteResponse.from_result(result)


@router.post("/{user_id}/restore", response_model=RestoreResponse)
async def restore_user(
    user_id: str,
    service: Annotated[UserSoftDeleteService, Depends(get_soft_delete_service)],
    tx: Annotated[AsyncSession, Depends(get_db_transactional)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> RestoreResponse:
    """Restore one soft-deleted user; 404 if missing, 409 if not deleted."""
    result = await service.restore_user(tx, user_id=user_id, restored_by=actor_id)
    return RestoreResponse.from_result(result)
