"""Shared enumerations for the audit service.

Cross-cutting enums used by application and infrastructure (e.g. audit
action, actor type). User-domain enums (UserType, UserStatus) live in
app.domain.enums.
"""

from enum import Enum


class ActorType(str, Enum):
    """Who performed an audited action."""

    USER = "user"
    SYSTEM = "system"


class AuditAction(str, Enum):
    """Kinds of change recorded in the user audit trail."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ROLE_CHANGE = "ROLE_CHANGE"
    STATUS_CHANGE = "STATUS_CHANGE"
    SOFT_DELETE = "SOFT_DELETE"
    RESTORE = "RESTORE"
    PASSWORD_RESET = "PASSWORD_RESET"
