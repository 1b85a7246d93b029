"""Profile repository. Interface methods return application DTOs."""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.application.dtos.user import (
    PROFILE_CONTACT_FIELDS,
    DeletedUser,
    DeletedUserFilter,
    ProfileExportFilter,
    ProfileResult,
)
from app.application.dtos.user_audit import PerformerInfo
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.exceptions import PersistenceException
from app.infrastructure.persistence.models.profile import Profile
from app.shared.utils.datetime import ensure_utc

_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "email",
        "image",
        "type",
        "status",
        "deleted_at",
        "deleted_by",
        "deletion_reason",
        *PROFILE_CONTACT_FIELDS,
    }
)
_CREATABLE_FIELDS = _UPDATABLE_FIELDS - {"deleted_at", "deleted_by", "deletion_reason"}


def _profile_to_result(p: Profile) -> ProfileResult:
    """Map ORM Profile to application ProfileResult."""
    return ProfileResult(
        id=p.id,
        name=p.name,
        email=p.email,
        type=p.type,
        status=p.status,
        deleted_at=ensure_utc(p.deleted_at),
        deleted_by=p.deleted_by,
        deletion_reason=p.deletion_reason,
        contact_name=p.contact_name,
        contact_number=p.contact_number,
        company_name=p.company_name,
        website=p.website,
        street1=p.street1,
        street2=p.street2,
        city=p.city,
        state=p.state,
        zip=p.zip,
        created_at=ensure_utc(p.created_at),
    )


def _deleted_conditions(filters: DeletedUserFilter) -> list[Any]:
    conditions: list[Any] = [Profile.deleted_at.is_not(None)]
    if filters.type is not None:
        conditions.append(Profile.type == filters.type)
    if filters.status is not None:
        conditions.append(Profile.status == filters.status)
    if filters.deleted_by is not None:
        conditions.append(Profile.deleted_by == filters.deleted_by)
    if filters.deleted_after is not None:
        conditions.append(Profile.deleted_at >= filters.deleted_after)
    if filters.deleted_before is not None:
        conditions.append(Profile.deleted_at <= filters.deleted_before)
    if filters.search:
        escaped = (
            filters.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        pattern = f"%{escaped}%"
        conditions.append(
            or_(
                *(
                    column.ilike(pattern, escape="\\")
                    for column in (
                        Profile.name,
                        Profile.email,
                        Profile.contact_name,
                        Profile.company_name,
                    )
                )
            )
        )
    return conditions


class ProfileRepository:
    """Profile reads, inserts and field updates on the caller's session (no commit)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get(self, user_id: str) -> Profile | None:
        try:
            result = await self.db.execute(select(Profile).where(Profile.id == user_id))
        except SQLAlchemyError as e:
            raise PersistenceException("profile.get_by_id", str(e)) from e
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> ProfileResult | None:
        """Return profile by id, soft-deleted rows included."""
        profile = await self._get(user_id)
        return _profile_to_result(profile) if profile is not None else None

    async def get_by_email(self, email: str) -> ProfileResult | None:
        """Return profile by exact email, soft-deleted rows included."""
        try:
            result = await self.db.execute(select(Profile).where(Profile.email == email))
        except SQLAlchemyError as e:
            raise PersistenceException("profile.get_by_email", str(e)) from e
        profile = result.scalar_one_or_none()
        return _profile_to_result(profile) if profile is not None else None

    async def create(self, **fields: Any) -> ProfileResult:
        """Insert a profile and flush. Unknown field names raise ValidationException."""
        unknown = set(fields) - _CREATABLE_FIELDS
        if unknown:
            raise ValidationException(f"Cannot create profile with fields: {sorted(unknown)}")
        profile = Profile(**fields)
        try:
            self.db.add(profile)
            await self.db.flush()
            await self.db.refresh(profile)
        except SQLAlchemyError as e:
            raise PersistenceException("profile.create", str(e)) from e
        return _profile_to_result(profile)

    async def update_fields(self, user_id: str, **fields: Any) -> ProfileResult:
        """Set fields on the profile and flush. Unknown field names raise ValidationException."""
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(f"Cannot update profile fields: {sorted(unknown)}")
        profile = await self._get(user_id)
        if profile is None:
            raise ResourceNotFoundException("profile", user_id)
        for name, value in fields.items():
            setattr(profile, name, value)
        try:
            await self.db.flush()
            await self.db.refresh(profile)
        except SQLAlchemyError as e:
            raise PersistenceException("profile.update_fields", str(e)) from e
        return _profile_to_result(profile)

    async def list_for_export(self, filters: ProfileExportFilter) -> list[ProfileResult]:
        """Profiles matching filters, newest created first."""
        conditions: list[Any] = []
        if filters.user_ids:
            conditions.append(Profile.id.in_(filters.user_ids))
        if not filters.include_deleted:
            conditions.append(Profile.deleted_at.is_(None))
        if filters.status is not None:
            conditions.append(Profile.status == filters.status)
        if filters.type is not None:
            conditions.append(Profile.type == filters.type)
        stmt = (
            select(Profile)
            .where(*conditions)
            .order_by(Profile.created_at.desc(), Profile.id)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("profile.list_for_export", str(e)) from e
        return [_profile_to_result(p) for p in result.scalars().all()]

    async def list_deleted(
        self,
        filters: DeletedUserFilter,
        *,
        skip: int = 0,
        limit: int = 10,
    ) -> list[DeletedUser]:
        """Soft-deleted profiles, most recently deleted first, with the deleting profile."""
        deleter = aliased(Profile)
        stmt = (
            select(Profile, deleter.name, deleter.email, deleter.image)
            .outerjoin(deleter, deleter.id == Profile.deleted_by)
            .where(and_(*_deleted_conditions(filters)))
            .order_by(Profile.deleted_at.desc(), Profile.id)
            .offset(skip)
            .limit(limit)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("profile.list_deleted", str(e)) from e
        return [
            DeletedUser(
                profile=_profile_to_result(p),
                deleted_by_user=(
                    PerformerInfo(id=p.deleted_by, name=name, email=email, image=image)
                    if p.deleted_by is not None
                    else None
                ),
            )
            for p, name, email, image in result.all()
        ]

    async def count_deleted(self, filters: DeletedUserFilter) -> int:
        """Count soft-deleted profiles matching filters."""
        stmt = select(func.count()).select_from(Profile).where(
            and_(*_deleted_conditions(filters))
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceException("profile.count_deleted", str(e)) from e
        return result.scalar_one()
