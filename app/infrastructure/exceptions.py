"""Infrastructure exceptions for persistence operations.

Persistence errors extend AuditServiceException so presentation can map
them to HTTP responses consistently. They are re-raised from the
underlying driver error (``raise ... from e``) and never swallowed.
"""

from app.domain.exceptions import AuditServiceException


class PersistenceException(AuditServiceException):
    """The database is unavailable or rejected a read or write."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Database operation failed: {operation}",
            "PERSISTENCE_ERROR",
            {"operation": operation, "reason": reason},
        )
