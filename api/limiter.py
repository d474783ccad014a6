"""
api/limiter.py -- slowapi rate limiter factory.

create_app() builds one Limiter per app and stores it on app.state.limiter,
where slowapi looks for it by convention. web.routes.build_router() applies
that same instance's @limit() decorator to GET /login, so counters and the
enabled flag belong to a single app and never leak into another one built
in the same process (tests build many).

Keyed on client address; counters live in process memory, which matches the
single-process deployment this app targets.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

LOGIN_RATE_LIMIT = "10/minute"


def build_limiter(enabled: bool = True) -> Limiter:
    """Return a fresh in-memory Limiter with its own counter storage."""
    return Limiter(key_func=get_remote_address, storage_uri="memory://", enabled=enabled)
