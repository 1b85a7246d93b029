"""Shared utilities: context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    ActorContext,
    clear_current_actor,
    get_actor_context,
    get_current_actor_id,
    get_current_request_id,
    set_current_actor,
)
from app.shared.enums import ActorType, AuditAction
from app.shared.utils import ensure_utc, generate_cuid, parse_iso_datetime, utc_now

__all__ = [
    "ActorContext",
    "ActorType",
    "AuditAction",
    "clear_current_actor",
    "ensure_utc",
    "generate_cuid",
    "get_actor_context",
    "get_current_actor_id",
    "get_current_request_id",
    "parse_iso_datetime",
    "set_current_actor",
    "utc_now",
]
