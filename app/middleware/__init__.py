"""HTTP middleware: request ID and actor context.

Applied in main app; order matters (last added = outermost).
Import and use from app.main.
"""

from app.middleware.actor_context import ActorContextMiddleware
from app.middleware.request_id import RequestIDMiddleware

__all__ = [
    "ActorContextMiddleware",
    "RequestIDMiddleware",
]
