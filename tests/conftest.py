"""
tests/conftest.py -- Shared test fixtures for the login flow tests.

This module provides:
  - FakeProvider: stands in for auth.oauth.GitHubProvider on app.state
  - make_settings(): validated Settings that ignore the developer's .env
  - app: a fresh FastAPI app per test, web router mounted
  - web_client: TestClient with follow_redirects=False
  - client_factory: extra TestClients (independent cookie jars) on the same app

Design: every test gets its own app built by create_app(), including its own
slowapi Limiter, so no state leaks between tests. make_settings() switches
rate limiting off; tests that need it build an app with rate_limit_enabled=True.

follow_redirects=False is essential: we assert on redirect status codes and
Location headers, which disappear once the client follows them.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.responses import RedirectResponse

from api.main import create_app
from auth.errors import TokenExchangeError
from auth.models import ProviderUser
from core.config import Settings, load_settings
from web.routes import build_router

TEST_SECRET = "test-session-secret-0123456789abcdef"

ALICE = {
    "id": 1,
    "login": "alice",
    "name": "Alice",
    "email": "a@x.com",
    "avatar_url": "http://x/a.png",
}
BOB = {
    "id": 2,
    "login": "bob",
    "name": "Bob",
    "email": None,
    "avatar_url": None,
}


def make_settings(**overrides) -> Settings:
    """Return Settings suitable for TestClient (Host: testserver, no .env)."""
    values = {
        "_env_file": None,
        "github_client_id": "test-client-id",
        "github_client_secret": "test-client-secret",
        "session_secret": TEST_SECRET,
        "allowed_hosts": ["testserver"],
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return load_settings(**values)


class FakeProvider:
    """In-memory provider with the same three coroutines as GitHubProvider.

    users maps an authorization code to either a GitHub /user payload (dict)
    or an exception instance that fetch_user() raises for that code. Codes
    not in the map fail the exchange with TokenExchangeError, the way GitHub
    answers bad_verification_code.
    """

    name = "github"
    authorize_url = "https://github.test/login/oauth/authorize"

    def __init__(self, users: dict[str, dict | Exception] | None = None) -> None:
        self.users = dict(users or {})
        self.exchanged: list[str] = []

    async def authorization_redirect(self, request: Request) -> RedirectResponse:
        return RedirectResponse(f"{self.authorize_url}?client_id=test-client-id", status_code=307)

    async def exchange_code(self, request: Request) -> dict:
        code = request.query_params.get("code", "")
        if code not in self.users:
            raise TokenExchangeError(f"bad_verification_code: {code!r}")
        self.exchanged.append(code)
        return {"access_token": f"token-{code}", "token_type": "bearer"}

    async def fetch_user(self, token: dict) -> ProviderUser:
        code = token["access_token"].removeprefix("token-")
        payload = self.users[code]
        if isinstance(payload, Exception):
            raise payload
        return ProviderUser.model_validate(payload)


def mount_web(app: FastAPI) -> FastAPI:
    """Mount the web UI router the way asgi.py does and return the app."""
    app.include_router(build_router(app.state.limiter), tags=["Web UI"])
    return app


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider({"alice-code": ALICE, "bob-code": BOB})


@pytest.fixture
def app(settings: Settings, fake_provider: FakeProvider) -> FastAPI:
    application = create_app(settings, provider=fake_provider)
    return mount_web(application)


@pytest.fixture
def web_client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def client_factory(app: FastAPI) -> Iterator[Callable[[], TestClient]]:
    """Yield a callable that opens another TestClient with its own cookie jar."""
    opened: list[TestClient] = []

    def _open() -> TestClient:
        client = TestClient(app, follow_redirects=False, raise_server_exceptions=True)
        client.__enter__()
        opened.append(client)
        return client

    yield _open

    for client in opened:
        client.__exit__(None, None, None)
