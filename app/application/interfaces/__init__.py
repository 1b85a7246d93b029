"""Application ports (repository protocols)."""

from app.application.interfaces.repositories import (
    IProfileRepository,
    IUserAuditRepository,
)

__all__ = ["IProfileRepository", "IUserAuditRepository"]
