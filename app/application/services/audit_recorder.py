"""Audit recorder: appends one user audit entry inside the caller's transaction.

The recorder never opens, commits, or rolls back a transaction. Callers pass
the session that performs the business mutation; the entry is flushed on
that session so a failure here aborts the mutation too.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from app.application.dtos.user_audit import AuditEntryCreate, AuditEntryResult
from app.application.interfaces.repositories import IUserAuditRepository
from app.application.services.change_diff import ChangeDiffEngine, to_jsonable
from app.application.services.sensitive_field_filter import SensitiveFieldFilter
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

RepositoryFactory = Callable[[Any], IUserAuditRepository]


class AuditRecorder:
    """Sanitize, diff, and append audit entries (transaction supplied per call)."""

    def __init__(
        self,
        repository_factory: RepositoryFactory,
        sensitive_filter: SensitiveFieldFilter | None = None,
        diff_engine: ChangeDiffEngine | None = None,
    ) -> None:
        self._repository_factory = repository_factory
        self._filter = sensitive_filter or SensitiveFieldFilter()
        self._diff = diff_engine or ChangeDiffEngine()

    def build_changes(
        self,
        before: dict[str, Any] | None,
        after: dict[str, Any] | None,
    ) -> dict[str, dict[str, Any]] | None:
        """Return the stored changes payload, or None when neither snapshot is given."""
        if before is None and after is None:
            return None
        diff = self._diff.diff(
            self._filter.sanitize(before or {}),
            self._filter.sanitize(after or {}),
        )
        return diff.to_dict()

    async def record(
        self,
        tx: Any,
        *,
        subject_id: str,
        action: AuditAction | str,
        performed_by: str | None = None,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEntryResult:
        """Append one entry for subject_id using the caller's transaction handle.

        Args:
            tx: Open transactional session of the calling mutation.
            subject_id: User whose record changed.
            action: Kind of change.
            performed_by: Acting user id; None for system-initiated changes.
            before: Snapshot before the change (None for pure creation).
            after: Snapshot after the change (None for pure deletion).
            reason: Optional justification; None when not given.
            metadata: Optional structured side-data (request id, source, ...).

        Returns:
            The stored entry.

        Raises:
            PersistenceException: If the store rejects the write. Not caught
                here, so the caller's transaction rolls back.
        """
        entry = AuditEntryCreate(
            subject_id=subject_id,
            action=getattr(action, "value", action),
            performed_by=performed_by,
            changes=self.build_changes(before, after),
            reason=reason,
            metadata=to_jsonable(metadata) if metadata is not None else None,
        )
        result = await self._repository_factory(tx).create(entry)
        logger.debug(
            "Recorded audit entry %s (%s) for user %s",
            result.id,
            entry.action,
            subject_id,
        )
        return result
