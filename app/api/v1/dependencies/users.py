"""User operation dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.audit import get_audit_recorder
from app.application.services.audit_recorder import AuditRecorder
from app.application.use_cases.users import UserBulkOperationsService, UserSoftDeleteService
from app.core.config import get_settings
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import ProfileRepository
from app.shared.context import get_current_actor_id


def get_bulk_operations_service(
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> UserBulkOperationsService:
    """Bulk service opening one transaction per user from the shared session factory."""
    return UserBulkOperationsService(get_session_factory(), ProfileRepository, recorder)


def get_soft_delete_service(
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> UserSoftDeleteService:
    """Single-user soft delete service; routes pass it their transactional session."""
    return UserSoftDeleteService(
        ProfileRepository,
        recorder,
        max_limit=get_settings().audit_max_page_size,
    )


async def get_actor_id() -> str | None:
    """Acting user id set by ActorContextMiddleware (None = system)."""
    return get_current_actor_id()
