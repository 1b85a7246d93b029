"""User use cases: bulk operations and soft delete, each with an audit trail."""

from app.application.use_cases.users.user_bulk_operations import UserBulkOperationsService
from app.application.use_cases.users.user_soft_delete import UserSoftDeleteService

__all__ = ["UserBulkOperationsService", "UserSoftDeleteService"]
