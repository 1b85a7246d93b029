"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.user import (
        DeletedUser,
        DeletedUserFilter,
        ProfileExportFilter,
        ProfileResult,
    )
    from app.application.dtos.user_audit import (
        AuditEntryCreate,
        AuditEntryResult,
        AuditLogFilter,
    )


class IUserAuditRepository(Protocol):
    """Protocol for the append-only user audit store (DIP)."""

    async def create(self, entry: AuditEntryCreate) -> AuditEntryResult:
        """Append one entry in the caller's transaction; return the stored record."""

    async def list(
        self,
        filters: AuditLogFilter,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[AuditEntryResult]:
        """Return filtered entries newest first, with performer fields resolved.

        limit=None returns every matching entry.
        """

    async def count(self, filters: AuditLogFilter) -> int:
        """Return the number of entries matching filters."""

    async def distinct_actions(self, subject_id: str) -> list[str]:
        """Return the distinct actions recorded for subject (sorted)."""

    async def count_by_action(self, subject_id: str) -> dict[str, int]:
        """Return entry counts per observed action for subject."""

    async def get_latest(self, subject_id: str) -> AuditEntryResult | None:
        """Return the most recent entry for subject, or None."""


class IProfileRepository(Protocol):
    """Protocol for user profile reads, creation and field updates (DIP)."""

    async def get_by_id(self, user_id: str) -> ProfileResult | None:
        """Return profile by id (including soft-deleted), or None."""

    async def get_by_email(self, email: str) -> ProfileResult | None:
        """Return profile by exact email (including soft-deleted), or None."""

    async def create(self, **fields: Any) -> ProfileResult:
        """Insert a profile in the caller's transaction; return it with its new id."""

    async def update_fields(self, user_id: str, **fields: Any) -> ProfileResult:
        """Set fields on the profile in the caller's transaction; return updated profile."""

    async def list_for_export(self, filters: ProfileExportFilter) -> list[ProfileResult]:
        """Return matching profiles, newest created first."""

    async def list_deleted(
        self,
        filters: DeletedUserFilter,
        *,
        skip: int = 0,
        limit: int = 10,
    ) -> list[DeletedUser]:
        """Return soft-deleted profiles matching filters, most recently deleted first."""

    async def count_deleted(self, filters: DeletedUserFilter) -> int:
        """Return the number of soft-deleted profiles matching filters."""
