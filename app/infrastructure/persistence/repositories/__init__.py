"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.profile_repo import ProfileRepository
from app.infrastructure.persistence.repositories.user_audit_repo import (
    UserAuditRepository,
)

__all__ = [
    "ProfileRepository",
    "UserAuditRepository",
]
