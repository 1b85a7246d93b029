"""Response schemas for the user audit trail API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.application.dtos.user_audit import AuditEntryResult, AuditLogPage, AuditSummary


class PerformerResponse(BaseModel):
    """Acting user as shown next to an audit entry."""

    id: str | None = None
    name: str | None = None
    email: str | None = None
    image: str | None = None


class UserAuditEntryResponse(BaseModel):
    """Single user audit entry (read)."""

    id: str
    user_id: str
    action: str
    changes: dict[str, Any] | None = None
    performed_by: str | None = None
    performer: PerformerResponse | None = None
    reason: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime

    @classmethod
    def from_result(cls, entry: AuditEntryResult) -> "UserAuditEntryResponse":
        performer = None
        if entry.performed_by is not None:
            performer = PerformerResponse(
                id=entry.performer.id or entry.performed_by,
                name=entry.performer.name,
                email=entry.performer.email,
                image=entry.performer.image,
            )
        return cls(
            id=entry.id,
            user_id=entry.subject_id,
            action=entry.action,
            changes=entry.changes,
            performed_by=entry.performed_by,
            performer=performer,
            reason=entry.reason,
            metadata=entry.metadata,
            created_at=entry.created_at,
        )


class PaginationResponse(BaseModel):
    """Page position and totals for a filtered listing."""

    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class AuditFiltersResponse(BaseModel):
    """Filter options for the audit listing UI."""

    available_actions: list[str] = Field(default_factory=list)


class UserAuditListResponse(BaseModel):
    """Paginated user audit entries, newest first."""

    entries: list[UserAuditEntryResponse]
    pagination: PaginationResponse
    filters: AuditFiltersResponse

    @classmethod
    def from_page(cls, page: AuditLogPage) -> "UserAuditListResponse":
        p = page.pagination
        return cls(
            entries=[UserAuditEntryResponse.from_result(e) for e in page.entries],
            pagination=PaginationResponse(
                page=p.page,
                limit=p.limit,
                total_count=p.total_count,
                total_pages=p.total_pages,
                has_next_page=p.has_next_page,
                has_prev_page=p.has_prev_page,
            ),
            filters=AuditFiltersResponse(available_actions=list(page.available_actions)),
        )


class UserAuditSummaryResponse(BaseModel):
    """Counts per action and most recent activity for one user."""

    total_entries: int
    action_counts: dict[str, int]
    last_activity_at: datetime | None = None
    last_action: str | None = None

    @classmethod
    def from_summary(cls, summary: AuditSummary) -> "UserAuditSummaryResponse":
        return cls(
            total_entries=summary.total_entries,
            action_counts=dict(summary.action_counts),
            last_activity_at=summary.last_activity_at,
            last_action=summary.last_action,
        )
