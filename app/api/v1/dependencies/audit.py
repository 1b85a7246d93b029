"""User audit dependencies (composition root).

Builds the recorder and query service from settings and SQLAlchemy
repositories; routes depend only on these, not on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.audit_query_service import AuditQueryService
from app.application.services.audit_recorder import AuditRecorder
from app.application.services.sensitive_field_filter import SensitiveFieldFilter
from app.core.config import get_settings
from app.infrastructure.persistence.database import get_db
from app.infrastructure.persistence.repositories import UserAuditRepository


def get_sensitive_field_filter() -> SensitiveFieldFilter:
    """Default denylist plus AUDIT_EXTRA_SENSITIVE_FIELDS."""
    return SensitiveFieldFilter().with_extra_fields(get_settings().extra_sensitive_fields)


def get_audit_recorder(
    sensitive_filter: Annotated[SensitiveFieldFilter, Depends(get_sensitive_field_filter)],
) -> AuditRecorder:
    """Recorder writing through UserAuditRepository on the caller's session."""
    return AuditRecorder(UserAuditRepository, sensitive_filter=sensitive_filter)


async def get_audit_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditQueryService:
    """Query service over a read session."""
    settings = get_settings()
    return AuditQueryService(
        UserAuditRepository(db),
        default_limit=settings.audit_default_page_size,
        max_limit=settings.audit_max_page_size,
    )
