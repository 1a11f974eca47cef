"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost zero logic). The store maps
rows to User; the service maps User to PublicUser before anything leaves the
auth core, so hashed_password never crosses the service boundary.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class User:
    """A stored account.

    id is an opaque generated identity (UUID4 string) assigned by the store.
    username is unique and never changes after creation.
    """

    username: str
    email: str
    hashed_password: str
    id: str | None = None
    created_at: str | None = None

    def public_view(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
        )

    def claims(self) -> dict[str, Any]:
        """Identity claim set embedded in session tokens."""
        return {"user_id": self.id, "username": self.username, "email": self.email}


@dataclass(frozen=True)
class PublicUser:
    """A User with the password hash removed."""

    id: str | None
    username: str
    email: str
    created_at: str | None = None


@dataclass(frozen=True)
class AuthResult:
    """Returned by register and login."""

    user: PublicUser
    access_token: str


@dataclass(frozen=True)
class VerifyResult:
    """Returned by verify_and_refresh. claims are as signed at issuance time."""

    claims: dict[str, Any]
    access_token: str
