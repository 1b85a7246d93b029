"""Application use cases: one entry point per workflow."""

from app.application.use_cases.users import UserBulkOperationsService, UserSoftDeleteService

__all__ = ["UserBulkOperationsService", "UserSoftDeleteService"]
