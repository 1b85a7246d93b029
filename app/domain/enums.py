"""Domain enums for user profiles."""

from enum import Enum


class UserType(str, Enum):
    """Role of a platform user."""

    VENDOR = "VENDOR"
    CLIENT = "CLIENT"
    DRIVER = "DRIVER"
    ADMIN = "ADMIN"
    HELPDESK = "HELPDESK"
    SUPER_ADMIN = "SUPER_ADMIN"


class UserStatus(str, Enum):
    """Account status of a platform user."""

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    DELETED = "DELETED"
