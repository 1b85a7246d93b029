"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions and application services.
Routes depend only on these dependencies, not on infrastructure directly.
"""

from app.api.v1.dependencies.audit import (
    get_audit_query_service,
    get_audit_recorder,
    get_sensitive_field_filter,
)
from app.api.v1.dependencies.db import get_db, get_db_transactional
from app.api.v1.dependencies.users import (
    get_actor_id,
    get_bulk_operations_service,
    get_soft_delete_service,
)

__all__ = [
    "get_actor_id",
    "get_audit_query_service",
    "get_audit_recorder",
    "get_bulk_operations_service",
    "get_db",
    "get_db_transactional",
    "get_sensitive_field_filter",
    "get_soft_delete_service",
]
