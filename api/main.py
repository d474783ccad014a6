"""
api/main.py -- FastAPI application factory for the GitHub login demo.

create_app() builds a fully wired app from an explicit Settings object and an
optional provider client. Nothing here reads the environment on its own: the
production assembly in asgi.py passes get_settings(), tests pass their own.

Run with:  python main.py
           uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. log_requests          -- one access-log line per request
  3. SessionMiddleware     -- signed cookie session (request.session)

Exception handlers turn the auth/errors.py taxonomy, slowapi's
RateLimitExceeded, and anything unexpected into plain-text responses.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import PlainTextResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

from api.limiter import build_limiter
from api.models import HealthResponse
from auth.errors import AuthFlowError
from auth.oauth import GitHubProvider
from core.config import Settings, get_settings

APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("ghlogin.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log startup and shutdown.

    All state (settings, provider) is attached in create_app() before the
    server starts, so there is nothing to build or tear down here.
    """
    logger.info(
        "GitHub login server starting up (provider=%s, redirect=%s)",
        app.state.provider.name,
        app.state.settings.redirect_url,
    )
    yield
    logger.info("GitHub login server shutdown complete")


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Logs the path only. The callback's query string carries the authorization
# code and state, which must not end up in access logs.
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Exception handlers
#
# Bodies are short fixed strings. The chained cause is logged server-side and
# never echoed back to the browser.
# ---------------------------------------------------------------------------


async def auth_flow_error_handler(request: Request, exc: AuthFlowError) -> PlainTextResponse:
    """Surface a failed callback as 400/500 with the error's public message."""
    logger.warning(
        "Login callback failed: %s (%s)",
        type(exc).__name__,
        exc.__cause__ or exc,
    )
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> PlainTextResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = PlainTextResponse("Too many requests.", status_code=429)
    response.headers["Retry-After"] = str(retry_after)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Catch-all for unexpected server errors; the stack trace goes to the log only."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return PlainTextResponse("Internal Server Error", status_code=500)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None, provider=None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Validated configuration. Defaults to get_settings(), which
            raises ConfigError when credentials are missing.
        provider: Object exposing authorization_redirect / exchange_code /
            fetch_user. Defaults to a GitHubProvider built from settings.

    The web router is mounted by asgi.py (and by tests), not here:
        app.include_router(build_router(app.state.limiter))
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="GitHub OAuth Login Example",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.provider = provider or GitHubProvider(settings)

    # One limiter per app; slowapi looks for app.state.limiter by convention.
    # web.routes.build_router() decorates GET /login with this instance.
    app.state.limiter = build_limiter(enabled=settings.rate_limit_enabled)

    # add_middleware() prepends, so the last registration is the outermost.
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",  # the provider's redirect back is a top-level GET
        https_only=settings.secure_cookies,
    )
    app.middleware("http")(log_requests)
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    app.add_exception_handler(AuthFlowError, auth_flow_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/api/v1/health", tags=["Health"])
    async def health(request: Request) -> HealthResponse:
        """Return liveness, version, and the configured provider."""
        return HealthResponse(version=APP_VERSION, provider=request.app.state.provider.name)

    return app
