"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import UserStatus, UserType
from app.domain.exceptions import (
    AuditServiceException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UserModificationException,
    ValidationException,
)

__all__ = [
    # Enums
    "UserStatus",
    "UserType",
    # Exceptions
    "AuditServiceException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "UserModificationException",
    "ValidationException",
]
