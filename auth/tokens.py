"""
auth/tokens.py -- Signed, time-bounded session tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the identity claim set
       {user_id, username, email} plus iat and exp. The signature binds the
       claims and the expiry, so any tampering is detected on verify.

  Lifetime: 24 hours from issuance, fixed. TOKEN_LIFETIME is a module
       constant on purpose -- callers wanting a different policy change code.

  Failures: verify() raises InvalidToken for every failure mode (bad
       signature, wrong secret, malformed, expired, missing identity claims).
       Callers cannot tell "expired" from "tampered", so the error is not an
       oracle.

  Clock: expiry is checked against the injected clock rather than the
       library's wall-clock check, so issuance and verification always agree
       on "now" and tests can mint already-expired tokens.

Layer rule: no imports from api/ or core/. The secret is passed in by the
bootstrap code, never read from the environment here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from auth.errors import InvalidToken

logger = logging.getLogger("authservice.tokens")

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(hours=24)

# Set by issue(); caller-supplied values are replaced.
_TIME_CLAIMS = ("iat", "exp")
# Registered claims removed before handing a claim set back to callers.
_REGISTERED_CLAIMS = _TIME_CLAIMS + ("sub",)
_IDENTITY_CLAIMS = ("user_id", "username", "email")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issue, verify and refresh session tokens.

    Usage:
        tokens = TokenService(secret_key=settings.jwt_secret)
        token = tokens.issue({"user_id": "...", "username": "alice", "email": "a@x.com"})
        claims = tokens.verify(token)
        claims, fresh = tokens.refresh(token)
    """

    def __init__(
        self,
        secret_key: str,
        lifetime: timedelta = TOKEN_LIFETIME,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("Token signing secret cannot be empty")
        self._secret_key = secret_key
        self._lifetime = lifetime
        self._clock = clock

    def issue(self, claims: dict[str, Any]) -> str:
        """Sign claims with a fresh iat and exp = iat + lifetime."""
        issued_at = self._clock()
        payload = {key: value for key, value in claims.items() if key not in _TIME_CLAIMS}
        payload["iat"] = issued_at
        payload["exp"] = issued_at + self._lifetime
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict[str, Any]:
        """Return the claim set of a valid token, without registered time fields.

        Raises InvalidToken on any failure.
        """
        if not isinstance(token, str) or not token:
            raise InvalidToken()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "require_exp": True, "require_iat": True},
            )
        except JWTError as exc:
            logger.info("Token rejected: %s", type(exc).__name__)
            raise InvalidToken() from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self._clock().timestamp():
            logger.info("Token rejected: expired")
            raise InvalidToken()
        if any(name not in payload for name in _IDENTITY_CLAIMS):
            logger.info("Token rejected: missing identity claims")
            raise InvalidToken()

        return {key: value for key, value in payload.items() if key not in _REGISTERED_CLAIMS}

    def refresh(self, token: str) -> tuple[dict[str, Any], str]:
        """Verify token and re-issue its claims with a new lifetime window."""
        claims = self.verify(token)
        return claims, self.issue(claims)

    def expires_at(self, token: str) -> datetime:
        """Return the expiry of a token that has already passed verify().

        Used for diagnostics and tests; reads exp without re-checking the signature.
        """
        exp = jwt.get_unverified_claims(token)["exp"]
        return datetime.fromtimestamp(exp, tz=timezone.utc)
