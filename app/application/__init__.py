"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories).
"""

from app.application.interfaces import IProfileRepository, IUserAuditRepository
from app.application.services import (
    AuditQueryService,
    AuditRecorder,
    ChangeDiffEngine,
    SensitiveFieldFilter,
)
from app.application.use_cases import UserBulkOperationsService, UserSoftDeleteService

__all__ = [
    "AuditQueryService",
    "AuditRecorder",
    "ChangeDiffEngine",
    "IProfileRepository",
    "IUserAuditRepository",
    "SensitiveFieldFilter",
    "UserBulkOperationsService",
    "UserSoftDeleteService",
]
