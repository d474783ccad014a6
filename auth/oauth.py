"""
auth/oauth.py -- GitHub provider client built on Authlib's Starlette integration.

GitHubProvider is the only object in the app that talks to GitHub. Routes
reach it through request.app.state.provider, which is how tests swap in a
fake provider without patching modules.

Each GitHubProvider owns a private authlib OAuth registry, built from the
Settings it is given. Nothing is registered at import time.

Security notes:
  [S1] The OAuth state parameter (login CSRF protection) is random per login.
       authorization_redirect() stores it in the signed session with a
       one-hour expiry; exchange_code() lets authlib pop and compare it before
       any token request is made. A missing or mismatched state raises
       StateMismatchError.

  [S2] The access token is returned to the caller and used once for GET /user.
       It is never written to the session or logged.

  [S3] Both outbound calls are bounded by Settings.http_timeout. Nothing is
       retried; the first failure aborts the callback.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

import logging

import httpx
from authlib.integrations.base_client import MismatchingStateError
from authlib.integrations.starlette_client import OAuth, OAuthError
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import RedirectResponse

from auth.errors import DecodeError, StateMismatchError, TokenExchangeError, UserFetchError
from auth.models import ProviderUser
from core.config import Settings

logger = logging.getLogger("ghlogin.auth.oauth")

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"  # noqa: S106 -- URL, not a password
GITHUB_API_BASE_URL = "https://api.github.com/"


class GitHubProvider:
    """Authorization-code flow against GitHub.

    The three coroutines map onto the stages of a login:
      authorization_redirect -- send the browser to GitHub
      exchange_code          -- trade the callback's code for a token
      fetch_user             -- read the profile with that token
    """

    name = "github"

    def __init__(self, settings: Settings) -> None:
        self.redirect_url = settings.redirect_url
        self._oauth = OAuth()
        self.client = self._oauth.register(
            name=self.name,
            client_id=settings.github_client_id,
            client_secret=settings.github_client_secret,
            access_token_url=GITHUB_TOKEN_URL,
            authorize_url=GITHUB_AUTHORIZE_URL,
            api_base_url=GITHUB_API_BASE_URL,
            client_kwargs={"scope": settings.oauth_scope, "timeout": settings.http_timeout},
        )
        logger.info("GitHub OAuth provider registered (redirect=%s)", self.redirect_url)

    async def authorization_redirect(self, request: Request) -> RedirectResponse:
        """Return a 307 redirect to GitHub's authorize page.

        Equivalent to authlib's authorize_redirect(), which hard-codes a 302.
        The generated state is saved in request.session [S1].
        """
        rv = await self.client.create_authorization_url(self.redirect_url)
        await self.client.save_authorize_data(request, redirect_uri=self.redirect_url, **rv)
        return RedirectResponse(rv["url"], status_code=307)

    async def exchange_code(self, request: Request) -> dict:
        """Validate state and exchange the callback's ?code= for a token dict.

        Raises:
            StateMismatchError: The state is missing, expired, or foreign.
            TokenExchangeError: GitHub rejected the code (including a user
                denying access) or the token request failed in transport.
        """
        try:
            return await self.client.authorize_access_token(request)
        except MismatchingStateError as exc:
            logger.warning("OAuth callback rejected: state mismatch")
            raise StateMismatchError(str(exc)) from exc
        except (OAuthError, httpx.HTTPError) as exc:
            logger.warning("OAuth token exchange failed: %s", exc)
            raise TokenExchangeError(str(exc)) from exc

    async def fetch_user(self, token: dict) -> ProviderUser:
        """Fetch and parse GET https://api.github.com/user with token [S2].

        Raises:
            UserFetchError: Transport failure or non-2xx status.
            DecodeError: Body is not JSON, or lacks id/login of the right type.
        """
        try:
            resp = await self.client.get("user", token=token)
            resp.raise_for_status()
        except (OAuthError, httpx.HTTPError) as exc:
            logger.warning("GitHub user fetch failed: %s", exc)
            raise UserFetchError(str(exc)) from exc

        try:
            return ProviderUser.model_validate_json(resp.content)
        except ValidationError as exc:
            logger.warning("GitHub user response did not decode: %d error(s)", exc.error_count())
            raise DecodeError(str(exc)) from exc
