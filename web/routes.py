"""
web/routes.py -- Jinja2 template routes and the login flow.

These routes serve server-rendered HTML and redirects. They reach the
provider client through request.app.state.provider and the session through
auth/session.py; they never build cookies or talk to GitHub directly.

Login state machine:
  ANONYMOUS      -- no "user" key in the session
  AUTH_PENDING   -- browser sent to GitHub; only authlib's state entry is set
  AUTHENTICATED  -- "user" (plus optional name/email/avatar_url) is set

Routes:
  GET /          -- home page; login link or profile/logout links
  GET /login     -- 307 to GitHub's authorize page (rate limited)
  GET /callback  -- exchange code, fetch user, fill session, 303 /profile
  GET /profile   -- profile page, or 303 / when anonymous
  GET /logout    -- clear session, 303 /

The handlers are plain functions; build_router() registers them against the
Limiter owned by the app, so each app counts /login requests on its own.

Callback failures are raised as auth/errors.py exceptions and rendered by the
handler registered in api/main.py. The session is written only after both
outbound calls succeed, so a failed callback leaves an existing login intact.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from slowapi import Limiter

from api.limiter import LOGIN_RATE_LIMIT
from auth.dependencies import require_authenticated
from auth.session import clear_session, get_session, put_session, save_session

logger = logging.getLogger("ghlogin.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


# ---------------------------------------------------------------------------
# GET / -- home
# ---------------------------------------------------------------------------


def home(request: Request) -> HTMLResponse:
    session = get_session(request)
    return templates.TemplateResponse(request, "home.html", {"user": session.user})


# ---------------------------------------------------------------------------
# Login flow
# ---------------------------------------------------------------------------


async def login(request: Request) -> RedirectResponse:
    """Send the browser to GitHub to authorize this app.

    No user data is written here; the provider records the pending state in
    the session so the callback can be matched to this browser.
    """
    provider = request.app.state.provider
    return await provider.authorization_redirect(request)


async def callback(request: Request) -> RedirectResponse:
    """Complete the login started by GET /login.

    Flow:
      1. Validate state and exchange ?code= for a token (StateMismatchError,
         TokenExchangeError).
      2. GET /user with the token (UserFetchError, DecodeError).
      3. Overwrite all four session fields and redirect to /profile.

    Steps 1 and 2 raise before any session write.
    """
    provider = request.app.state.provider

    token = await provider.exchange_code(request)
    profile = await provider.fetch_user(token)

    session = put_session(
        get_session(request),
        user=profile.login,
        name=profile.name,
        email=profile.email,
        avatar_url=profile.avatar_url,
    )
    save_session(request, session)
    logger.info("Login succeeded for %s", profile.login)

    resp = RedirectResponse("/profile", status_code=303)
    resp.headers["Cache-Control"] = "no-store"
    return resp


def profile(request: Request) -> HTMLResponse:
    session = require_authenticated(request)
    if isinstance(session, RedirectResponse):
        return session
    return templates.TemplateResponse(
        request,
        "profile.html",
        {
            "user": session.user,
            "name": session.name,
            "email": session.email,
            "avatar_url": session.avatar_url,
        },
    )


def logout(request: Request) -> RedirectResponse:
    """Forget the login and return home. The GitHub token was never kept, so
    there is nothing to revoke."""
    user = get_session(request).user
    clear_session(request)
    if user:
        logger.info("Logout for %s", user)
    return RedirectResponse("/", status_code=303)


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


def build_router(limiter: Limiter) -> APIRouter:
    """Return the web UI router with GET /login limited by the given Limiter.

    Pass the app's own limiter (app.state.limiter), which is also the one
    slowapi consults for that app's requests.
    """
    router = APIRouter()
    router.add_api_route("/", home, methods=["GET"], response_class=HTMLResponse)
    router.add_api_route("/login", limiter.limit(LOGIN_RATE_LIMIT)(login), methods=["GET"])
    router.add_api_route("/callback", callback, methods=["GET"])
    router.add_api_route("/profile", profile, methods=["GET"], response_class=HTMLResponse)
    router.add_api_route("/logout", logout, methods=["GET"])
    return router
