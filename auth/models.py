"""
auth/models.py -- Identity shapes for the login flow.

Session is a plain dataclass (pure data container, zero logic beyond one
property) -- auth/session.py moves it in and out of the signed cookie.

ProviderUser is a pydantic model because it is parsed straight off the wire:
validation failures become DecodeError in auth/oauth.py.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


@dataclass
class Session:
    """Per-browser login state stored in the signed session cookie.

    user is the provider login handle. Its absence means the browser is
    anonymous; the other fields are only meaningful when user is set.
    """

    user: str | None = None
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user)


class ProviderUser(BaseModel):
    """GitHub GET /user response, reduced to the fields this app reads.

    GitHub returns null for name and email when the user keeps them private,
    so only id and login are required.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    login: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
