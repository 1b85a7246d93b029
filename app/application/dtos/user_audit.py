"""DTOs for the user audit trail (append, list, export, summary)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditEntryCreate:
    """Input for appending one audit entry. Append-only; no update.

    changes is None when no field-level comparison applies (stored as
    JSON null), otherwise ``{"before": {...}, "after": {...}}``.
    """

    subject_id: str
    action: str
    performed_by: str | None
    changes: dict[str, dict[str, Any]] | None
    reason: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class PerformerInfo:
    """Display fields of the actor behind an entry. All None when unresolved."""

    id: str | None = None
    name: str | None = None
    email: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class AuditEntryResult:
    """Single audit entry (read-model for list/export)."""

    id: str
    subject_id: str
    action: str
    performed_by: str | None
    changes: dict[str, dict[str, Any]] | None
    reason: str | None
    metadata: dict[str, Any] | None
    created_at: datetime
    performer: PerformerInfo = field(default_factory=PerformerInfo)


@dataclass(frozen=True)
class AuditLogFilter:
    """Optional, conjunctive filters applied to one subject's entries."""

    subject_id: str
    actions: tuple[str, ...] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    performed_by: str | None = None


@dataclass(frozen=True)
class Pagination:
    """1-indexed page metadata for a list response."""

    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> Pagination:
        total_pages = math.ceil(total_count / limit) if total_count else 0
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class AuditLogPage:
    """Result of AuditQueryService.list."""

    entries: list[AuditEntryResult]
    pagination: Pagination
    available_actions: list[str]


@dataclass(frozen=True)
class AuditSummary:
    """Aggregate view of a subject's audit trail."""

    total_entries: int
    action_counts: dict[str, int]
    last_activity_at: datetime | None = None
    last_action: str | None = None
