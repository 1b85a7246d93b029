"""Audit query service: paginated listing, CSV export, and summary of a user's audit trail."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any

from app.application.dtos.user_audit import (
    AuditEntryResult,
    AuditLogFilter,
    AuditLogPage,
    AuditSummary,
    Pagination,
)
from app.application.interfaces.repositories import IUserAuditRepository
from app.application.services.change_diff import (
    ChangeDiffEngine,
    FieldDiff,
    decode_missing,
    to_jsonable,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = get_logger(__name__)

CSV_HEADERS: tuple[str, ...] = (
    "Timestamp",
    "Action",
    "Performed By",
    "Email",
    "Field Changed",
    "Before Value",
    "After Value",
    "Reason",
)
NO_FIELD_PLACEHOLDER = "-"
SYSTEM_PERFORMER = "System"


def format_csv_value(value: Any) -> str:
    """Render one before/after value as CSV cell text.

    None, MISSING and the stored missing marker become "", dicts and lists
    their JSON text, booleans JSON literals, datetimes ISO 8601.
    """
    plain = to_jsonable(decode_missing(value))
    if plain is None:
        return ""
    if isinstance(plain, (dict, list, bool)):
        return json.dumps(plain)
    return str(plain)


class AuditQueryService:
    """Read side of the user audit trail."""

    def __init__(
        self,
        audit_repo: IUserAuditRepository,
        *,
        default_limit: int = 20,
        max_limit: int = 100,
        diff_engine: ChangeDiffEngine | None = None,
    ) -> None:
        self._repo = audit_repo
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._diff = diff_engine or ChangeDiffEngine()

    def _normalize_page(self, page: int | None, limit: int | None) -> tuple[int, int]:
        """Default non-positive page/limit and clamp limit to max_limit."""
        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else self._default_limit
        return page, min(limit, self._max_limit)

    @staticmethod
    def _build_filter(
        subject_id: str,
        actions: Iterable[str] | None,
        start_date: datetime | None,
        end_date: datetime | None,
        performed_by: str | None,
    ) -> AuditLogFilter:
        action_values = (
            tuple(getattr(a, "value", a) for a in actions) if actions else None
        )
        return AuditLogFilter(
            subject_id=subject_id,
            actions=action_values,
            start_date=start_date,
            end_date=end_date,
            performed_by=performed_by,
        )

    @traced("audit.list")
    async def list(
        self,
        *,
        subject_id: str,
        page: int = 1,
        limit: int | None = None,
        actions: Iterable[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        performed_by: str | None = None,
    ) -> AuditLogPage:
        """Return one page of entries (newest first) plus the action filter options."""
        page, limit = self._normalize_page(page, limit)
        filters = self._build_filter(subject_id, actions, start_date, end_date, performed_by)

        total_count = await self._repo.count(filters)
        pagination = Pagination.build(page, limit, total_count)
        entries: list[AuditEntryResult] = []
        if pagination.offset < total_count:
            entries = await self._repo.list(filters, skip=pagination.offset, limit=limit)
        available_actions = await self._repo.distinct_actions(subject_id)

        add_span_attributes(**{"audit.total_count": total_count})
        return AuditLogPage(
            entries=entries,
            pagination=pagination,
            available_actions=available_actions,
        )

    @traced("audit.export_csv")
    async def export_csv(
        self,
        *,
        subject_id: str,
        actions: Iterable[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        performed_by: str | None = None,
    ) -> str:
        """Return every matching entry as CSV, one row per changed field."""
        filters = self._build_filter(subject_id, actions, start_date, end_date, performed_by)
        entries = await self._repo.list(filters, skip=0, limit=None)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(CSV_HEADERS)
        rows = 0
        for entry in entries:
            for row in self._csv_rows(entry):
                writer.writerow(row)
                rows += 1
        logger.info(
            "Exported %d audit entries (%d rows) for user %s", len(entries), rows, subject_id
        )
        return buffer.getvalue()

    def _csv_rows(self, entry: AuditEntryResult) -> Iterator[list[str]]:
        """Expand one entry into CSV rows: one per changed field, or one placeholder row."""
        performer = entry.performer
        if entry.performed_by is None:
            performed_by = SYSTEM_PERFORMER
        else:
            performed_by = performer.name or entry.performed_by
        shared = [
            entry.created_at.isoformat(),
            entry.action,
            performed_by,
            performer.email or "",
        ]
        reason = entry.reason or ""

        emitted = False
        diff = FieldDiff.from_dict(entry.changes)
        for field_name in diff.fields:
            old, new = diff.before[field_name], diff.after[field_name]
            if self._diff.values_equal(old, new):
                continue
            emitted = True
            yield [*shared, field_name, format_csv_value(old), format_csv_value(new), reason]
        if not emitted:
            yield [
                *shared,
                NO_FIELD_PLACEHOLDER,
                NO_FIELD_PLACEHOLDER,
                NO_FIELD_PLACEHOLDER,
                reason,
            ]

    @traced("audit.summary")
    async def summary(self, subject_id: str) -> AuditSummary:
        """Return total entries, per-action counts, and the most recent activity."""
        action_counts = await self._repo.count_by_action(subject_id)
        latest = await self._repo.get_latest(subject_id)
        return AuditSummary(
            total_entries=sum(action_counts.values()),
            action_counts=action_counts,
            last_activity_at=latest.created_at if latest else None,
            last_action=latest.action if latest else None,
        )
