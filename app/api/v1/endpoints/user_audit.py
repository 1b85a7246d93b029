"""User audit API: paginated history, CSV export, and summary for one user."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.api.v1.dependencies import get_audit_query_service
from app.application.services.audit_query_service import AuditQueryService
from app.schemas.user_audit import UserAuditListResponse, UserAuditSummaryResponse
from app.shared.utils.datetime import ensure_utc, utc_now

router = APIRouter()


@router.get("/{user_id}/audit", response_model=UserAuditListResponse)
async def list_user_audit(
    user_id: str,
    audit: Annotated[AuditQueryService, Depends(get_audit_query_service)],
    page: int = Query(1, description="Page number (1-based)"),
    limit: int | None = Query(None, description="Page size (clamped to the configured maximum)"),
    action: list[str] | None = Query(None, description="Filter by action (repeatable)"),
    start_date: datetime | None = Query(None, description="From (inclusive) ISO8601"),
    end_date: datetime | None = Query(None, description="To (inclusive) ISO8601"),
    performed_by: str | None = Query(None, description="Filter by acting user id"),
) -> UserAuditListResponse:
    """List a user's audit entries, newest first."""
    result = await audit.list(
        subject_id=user_id,
        page=page,
        limit=limit,
        actions=action,
        start_date=ensure_utc(start_date),
        end_date=ensure_utc(end_date),
        performed_by=performed_by,
    )
    return UserAuditListResponse.from_page(result)


@router.get(
    "/{user_id}/audit/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}, "description": "CSV download"}},
)
async def export_user_audit(
    user_id: str,
    audit: Annotated[AuditQueryService, Depends(get_audit_query_service)],
    action: list[str] | None = Query(None, description="Filter by action (repeatable)"),
    start_date: datetime | None = Query(None, description="From (inclusive) ISO8601"),
    end_date: datetime | None = Query(None, description="To (inclusive) ISO8601"),
    performed_by: str | None = Query(None, description="Filter by acting user id"),
) -> Response:
    """Download every matching entry as CSV (one row per changed field)."""
    content = await audit.export_csv(
        subject_id=user_id,
        actions=action,
        start_date=ensure_utc(start_date),
        end_date=ensure_utc(end_date),
        performed_by=performed_by,
    )
    filename = f"audit-log-{user_id}-{utc_now().date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{user_id}/audit/summary", response_model=UserAuditSummaryResponse)
async def user_audit_summary(
    user_id: str,
    audit: Annotated[AuditQueryService, Depends(get_audit_query_service)],
) -> UserAuditSummaryResponse:
    """Counts per action and most recent activity for a user."""
    summary = await audit.summary(user_id)
    return UserAuditSummaryResponse.from_summary(summary)
