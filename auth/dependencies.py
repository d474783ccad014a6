"""
auth/dependencies.py -- Request-level authentication helpers.

The only credential is the signed session cookie; there are no bearer tokens
or API keys.

try_get_current_user() is the soft variant (returns None when anonymous).
require_authenticated() is the page guard used by /profile: it hands back the
Session, or a 303 redirect to the home page for anonymous browsers.

Layer rule: no imports from api/ or web/.
  auth/dependencies.py may import from fastapi/starlette (for Request and
  responses) because it sits at the edge of the request-handling layer.
"""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import RedirectResponse

from auth.models import Session
from auth.session import get_session


def try_get_current_user(request: Request) -> Session | None:
    """Return the authenticated Session, or None for an anonymous browser.

    Never raises -- a missing or tampered cookie is just an anonymous visitor.
    """
    session = get_session(request)
    if session.is_authenticated:
        return session
    return None


def require_authenticated(request: Request) -> Session | RedirectResponse:
    """Guard a page that needs a logged-in user.

    Call at the top of protected route handlers:
        session = require_authenticated(request)
        if isinstance(session, RedirectResponse):
            return session
    """
    session = try_get_current_user(request)
    if session is None:
        return RedirectResponse("/", status_code=303)
    return session
