"""Actor context middleware.

Reads the acting user's id, forwarded by the upstream auth layer in a
configurable header, and stores it with the request ID in context vars so
audit entries can attribute changes. A missing header means a system actor.
"""

import re
from typing import Callable

from app.middleware.request_id import get_header
from app.shared.context import clear_current_actor, set_current_actor

ACTOR_ID_MAX_LENGTH = 128
ACTOR_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_.:@-]{1," + str(ACTOR_ID_MAX_LENGTH) + r"}$"
)


def sanitize_actor_id(raw: str | None) -> str | None:
    """Return the stripped actor id, or None when absent or malformed."""
    if not raw:
        return None
    value = raw.strip()
    if not ACTOR_ID_ALLOWED_PATTERN.match(value):
        return None
    return value


def ActorContextMiddleware(app: Callable, header_name: str = "X-Actor-ID") -> Callable:
    """Set actor and request id context for the duration of each request. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        actor_id = sanitize_actor_id(get_header(scope, header_name))
        request_id = scope.get("state", {}).get("request_id")
        set_current_actor(actor_id, request_id=request_id)
        try:
            await app(scope, receive, send)
        finally:
            clear_current_actor()

    return asgi_app
