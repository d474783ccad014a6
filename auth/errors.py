"""
auth/errors.py -- Failure taxonomy for the OAuth callback.

Each error carries the HTTP status and the fixed message shown to the browser.
The underlying cause (authlib, httpx, or pydantic exception) is chained with
"raise ... from" and only ever reaches the log, never the response body.

api/main.py registers a single exception handler for AuthFlowError.
"""

from __future__ import annotations


class AuthFlowError(Exception):
    """Base class for failures while completing a provider callback."""

    status_code: int = 500
    public_message: str = "Authentication failed"


class StateMismatchError(AuthFlowError):
    """The callback's state parameter does not match the pending login.

    Either the login was never started from this browser, the pending state
    expired, or the callback URL was forged (login CSRF).
    """

    status_code = 400
    public_message = "Invalid OAuth state"


class TokenExchangeError(AuthFlowError):
    """The provider rejected the authorization code, or the call failed."""

    public_message = "Failed to exchange token"


class UserFetchError(AuthFlowError):
    """The user-info request failed in transport or returned a non-2xx status."""

    public_message = "Failed to get user info"


class DecodeError(AuthFlowError):
    """The user-info body was not JSON of the expected shape."""

    public_message = "Failed to decode user info"
