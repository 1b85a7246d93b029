"""User audit repository. Append-only; implements IUserAuditRepository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, and_, func, null, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user_audit import (
    AuditEntryCreate,
    AuditEntryResult,
    AuditLogFilter,
    PerformerInfo,
)
from app.infrastructure.exceptions import PersistenceException
from app.infrastructure.persistence.models.profile import Profile
from app.infrastructure.persistence.models.user_audit import UserAudit
from app.shared.utils.datetime import ensure_utc
from app.shared.utils.generators import generate_cuid


def _orm_to_result(row: UserAudit, performer: PerformerInfo | None = None) -> AuditEntryResult:
    """Map ORM to application DTO."""
    return AuditEntryResult(
        id=row.id,
        subject_id=row.user_id,
        action=row.action,
        performed_by=row.performed_by,
        changes=row.changes,
        reason=row.reason,
        metadata=row.audit_metadata,
        created_at=ensure_utc(row.created_at) or row.created_at,
        performer=performer or PerformerInfo(id=row.performed_by),
    )


def _conditions(filters: AuditLogFilter) -> list[Any]:
    conditions: list[Any] = [UserAudit.user_id == filters.subject_id]
    if filters.actions:
        conditions.append(UserAudit.action.in_(filters.actions))
    if filters.start_date is not None:
        conditions.append(UserAudit.created_at >= filters.start_date)
    if filters.end_date is not None:
        conditions.append(UserAudit.created_at <= filters.end_date)
    if filters.performed_by is not None:
        conditions.append(UserAudit.performed_by == filters.performed_by)
    return conditions


class UserAuditRepository:
    """Append-only user audit repository. No update/delete.

    SQLAlchemy errors are re-raised as PersistenceException; nothing is
    retried or swallowed, so a failed write aborts the caller's transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: AuditEntryCreate) -> AuditEntryResult:
        """Append one entry on the caller's session (flush, no commit)."""
        row = UserAudit(
            id=generate_cuid(),
            user_id=entry.subject_id,
            action=entry.action,
            changes=entry.changes if entry.changes is not None else JSON.NULL,
            performed_by=entry.performed_by,
            reason=entry.reason,
            audit_metadata=entry.metadata if entry.metadata is not None else null(),
        )
        try:
            self.db.add(row)
            await self.db.flush()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            raise PersistenceException("user_audit.create", str(e)) from e
        return _orm_to_result(row)

    async def list(
        self,
        filters: AuditLogFilter,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[AuditEntryResult]:
        """List entries newest first (ties: later insert first), joined with performer profile."""
        stmt = (
            select(UserAudit, Profile.name, Profile.email, Profile.image)
            .outerjoin(Profile, Profile.id == UserAudit.performed_by)
            .where(and_(*_conditions(filters)))
            .order_by(UserAudit.created_at.desc(), UserAudit.seq.desc())
            .offset(skip)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("user_audit.list", str(e)) from e
        return [
            _orm_to_result(
                row,
                PerformerInfo(id=row.performed_by, name=name, email=email, image=image),
            )
            for row, name, email, image in result.all()
        ]

    async def count(self, filters: AuditLogFilter) -> int:
        """Count entries matching filters."""
        stmt = select(func.count()).select_from(UserAudit).where(and_(*_conditions(filters)))
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("user_audit.count", str(e)) from e
        return result.scalar_one()

    async def distinct_actions(self, subject_id: str) -> list[str]:
        """Distinct actions recorded for subject, sorted."""
        stmt = (
            select(UserAudit.action)
            .where(UserAudit.user_id == subject_id)
            .distinct()
            .order_by(UserAudit.action)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("user_audit.distinct_actions", str(e)) from e
        return list(result.scalars().all())

    async def count_by_action(self, subject_id: str) -> dict[str, int]:
        """Entry count per observed action for subject."""
        stmt = (
            select(UserAudit.action, func.count(UserAudit.id))
            .where(UserAudit.user_id == subject_id)
            .group_by(UserAudit.action)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("user_audit.count_by_action", str(e)) from e
        return {action: count for action, count in result.all()}

    async def get_latest(self, subject_id: str) -> AuditEntryResult | None:
        """Most recent entry for subject, or None."""
        stmt = (
            select(UserAudit)
            .where(UserAudit.user_id == subject_id)
            .order_by(UserAudit.created_at.desc(), UserAudit.seq.desc())
            .limit(1)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("user_audit.get_latest", str(e)) from e
        row = result.scalar_one_or_none()
        return _orm_to_result(row) if row is not None else None
