"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from app.infrastructure.persistence.models.profile import Profile
from app.infrastructure.persistence.models.user_audit import UserAudit

__all__ = [
    "CuidMixin",
    "Profile",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UserAudit",
]
