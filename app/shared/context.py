"""Request context management using contextvars.

Async-safe storage for request-scoped data: the acting user forwarded by
the upstream auth layer and the request ID assigned by middleware.

Usage:
    set_current_actor(actor_id="user123")
    actor_id = get_current_actor_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from app.shared.enums import ActorType

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    actor_id: str | None
    request_id: str | None = None

    @property
    def actor_type(self) -> ActorType:
        return ActorType.USER if self.actor_id else ActorType.SYSTEM


def set_current_actor(actor_id: str | None, request_id: str | None = None) -> None:
    """Set the acting user (None = system) and optional request ID for this request."""
    _current_actor_id.set(actor_id or None)
    if request_id is not None:
        _current_request_id.set(request_id)


def clear_current_actor() -> None:
    """Clear the current actor context."""
    _current_actor_id.set(None)
    _current_request_id.set(None)


def get_current_actor_id() -> str | None:
    """Return the acting user ID, or None for system-initiated work."""
    return _current_actor_id.get()


def get_current_request_id() -> str | None:
    """Return the current request ID, if any."""
    return _current_request_id.get()


def get_actor_context() -> ActorContext:
    """Return a snapshot of the current actor context."""
    return ActorContext(
        actor_id=_current_actor_id.get(),
        request_id=_current_request_id.get(),
    )
