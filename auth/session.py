"""
auth/session.py -- Typed access to the signed cookie session.

Storage is Starlette's SessionMiddleware: the whole session dict is JSON
encoded, signed with SESSION_SECRET via itsdangerous, and sent back as a
single cookie. The middleware already handles the awkward cases:

  - missing cookie              -> request.session == {}
  - bad signature or expired    -> request.session == {}
  - session emptied by handler  -> cookie overwritten with an expired value

so nothing here can fail a request. These helpers only translate between
that untyped dict and the Session dataclass.

Save happens in two steps: save_session() writes into request.session, and
the middleware serializes and signs it into Set-Cookie when the response
starts. Handlers never build the cookie header themselves.

The dict may also hold authlib's pending-login entries ("_state_github_...").
get_session() ignores them and save_session() leaves them alone; only
clear_session() removes them.
"""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any

from starlette.requests import HTTPConnection

from auth.models import Session

SESSION_KEYS: tuple[str, ...] = tuple(f.name for f in fields(Session))


def _as_str(value: Any) -> str | None:
    # Anything other than a non-empty string reads back as absent.
    if isinstance(value, str) and value:
        return value
    return None


def get_session(request: HTTPConnection) -> Session:
    """Return the Session carried by the request's cookie (empty if none)."""
    raw = request.session
    return Session(**{key: _as_str(raw.get(key)) for key in SESSION_KEYS})


def put_session(session: Session, **values: str | None) -> Session:
    """Return a copy of session with the given fields set.

    Raises:
        KeyError: If a field name is not one of SESSION_KEYS.
    """
    unknown = sorted(set(values) - set(SESSION_KEYS))
    if unknown:
        raise KeyError(f"Unknown session field(s): {', '.join(unknown)}")
    return replace(session, **{key: _as_str(value) for key, value in values.items()})


def save_session(request: HTTPConnection, session: Session) -> None:
    """Write session back into the cookie-backed store.

    Absent fields are removed rather than stored, so a login by a user with a
    private email cannot inherit the previous user's address.
    """
    store = request.session
    for key in SESSION_KEYS:
        value = getattr(session, key)
        if value:
            store[key] = value
        else:
            store.pop(key, None)


def clear_session(request: HTTPConnection) -> None:
    """Remove every key, including pending OAuth state."""
    request.session.clear()
