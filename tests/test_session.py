"""Unit tests for auth/session.py -- typed access to request.session.

The helpers only need an object with a .session dict, so a SimpleNamespace
stands in for the Starlette request.
"""

from types import SimpleNamespace

import pytest

from auth.models import Session
from auth.session import SESSION_KEYS, clear_session, get_session, put_session, save_session


def _request(data: dict | None = None) -> SimpleNamespace:
    return SimpleNamespace(session=dict(data or {}))


def test_session_keys_match_dataclass_fields():
    """The stored keys are exactly the Session fields."""
    assert SESSION_KEYS == ("user", "name", "email", "avatar_url")


def test_empty_store_is_anonymous():
    """An empty store reads as an anonymous session."""
    session = get_session(_request())
    assert session == Session()
    assert not session.is_authenticated


def test_get_reads_all_fields():
    """Every stored field is read back."""
    request = _request({"user": "alice", "name": "Alice", "email": "a@x.com", "avatar_url": "http://x/a.png"})
    session = get_session(request)
    assert session.is_authenticated
    assert session.user == "alice"
    assert session.avatar_url == "http://x/a.png"


def test_non_string_values_read_as_absent():
    """Values of the wrong type are treated as missing."""
    session = get_session(_request({"user": 42, "name": ["Alice"], "email": None}))
    assert session == Session()


def test_empty_user_is_anonymous():
    """An empty user string is not a login."""
    assert not get_session(_request({"user": ""})).is_authenticated


def test_get_ignores_pending_oauth_state():
    """Authlib's pending state entry is not a session field."""
    session = get_session(_request({"_state_github_abc": {"data": {}, "exp": 0}}))
    assert session == Session()


def test_put_returns_new_session():
    """put_session leaves its input unchanged."""
    original = Session()
    updated = put_session(original, user="alice", email="a@x.com")
    assert original == Session()
    assert updated == Session(user="alice", email="a@x.com")


def test_put_rejects_unknown_field():
    """Only Session fields can be set."""
    with pytest.raises(KeyError):
        put_session(Session(), token="secret")


def test_put_normalizes_empty_string_to_none():
    """An empty string clears the field."""
    assert put_session(Session(user="alice", name="Alice"), name="").name is None


def test_save_writes_and_prunes():
    """Saving overwrites set fields and drops empty ones."""
    request = _request({"user": "alice", "email": "a@x.com"})
    save_session(request, Session(user="bob", name="Bob"))
    assert request.session == {"user": "bob", "name": "Bob"}


def test_save_keeps_pending_oauth_state():
    """Saving does not touch keys it does not own."""
    request = _request({"_state_github_abc": {"exp": 1}})
    save_session(request, Session(user="alice"))
    assert request.session["_state_github_abc"] == {"exp": 1}
    assert request.session["user"] == "alice"


def test_clear_removes_everything():
    """Clearing empties the store, pending state included."""
    request = _request({"user": "alice", "_state_github_abc": {}})
    clear_session(request)
    assert request.session == {}
    assert get_session(request) == Session()
