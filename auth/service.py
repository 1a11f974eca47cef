"""
auth/service.py -- The auth core: register, login, verify-and-refresh.

AuthService is a stateless orchestrator over three injected collaborators:
  store   -- anything with get_by_username() and create_user() (CredentialStore)
  hasher  -- PasswordHasher
  tokens  -- TokenService

It holds no mutable state and no locks, so one instance is shared by every
request worker. Every failure leaves as an AuthError subclass from
auth/errors.py; store exceptions are translated here and never escape.

Plaintext passwords are passed straight to the hasher and never logged.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from typing import Protocol

from auth.errors import InvalidCredentials, RegistrationFailed, StoreUnavailable, UserAlreadyExists
from auth.models import AuthResult, User, VerifyResult
from auth.passwords import PasswordHasher
from auth.store import DuplicateUsernameError, StoreError
from auth.tokens import TokenService

logger = logging.getLogger("authservice.auth")


class CredentialStore(Protocol):
    def get_by_username(self, username: str) -> User | None: ...

    def create_user(self, user: User) -> User: ...


class AuthService:
    """Registration, login and token verification.

    Usage:
        service = AuthService(store=UserStore(url), hasher=PasswordHasher(),
                              tokens=TokenService(secret_key=secret))
        result = service.register("alice", "alice@x.com", "pw123")
        result = service.login("alice", "pw123")
        refreshed = service.verify_and_refresh(result.access_token)
    """

    def __init__(self, store: CredentialStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create an account and return its public view with a fresh token.

        Raises UserAlreadyExists if the username is taken, whether the
        look-up catches it or the store's unique constraint does (the race
        between two concurrent registrations). Any other store failure is
        RegistrationFailed.
        """
        if self._find(username) is not None:
            logger.info("Registration rejected: username=%s already exists", username)
            raise UserAlreadyExists()

        hashed = self.hasher.hash(password)
        try:
            user = self.store.create_user(User(username=username, email=email, hashed_password=hashed))
        except DuplicateUsernameError as exc:
            logger.info("Registration lost uniqueness race: username=%s", username)
            raise UserAlreadyExists() from exc
        except StoreError as exc:
            logger.error("Registration failed for username=%s: %s", username, exc)
            raise RegistrationFailed() from exc

        logger.info("User registered: user_id=%s username=%s", user.id, user.username)
        return AuthResult(user=user.public_view(), access_token=self.tokens.issue(user.claims()))

    def login(self, username: str, password: str) -> AuthResult:
        """Check credentials and return the user's public view with a fresh token.

        Unknown username and wrong password both raise InvalidCredentials with
        the same code and message. The reason attribute tells them apart in
        the logs only.
        """
        user = self._find(username)
        if user is None:
            self.hasher.verify_dummy(password)
            logger.info("Login failed: username=%s reason=%s", username, InvalidCredentials.NOT_FOUND)
            raise InvalidCredentials(InvalidCredentials.NOT_FOUND)

        if not self.hasher.verify(password, user.hashed_password):
            logger.info("Login failed: username=%s reason=%s", username, InvalidCredentials.INVALID_PASSWORD)
            raise InvalidCredentials(InvalidCredentials.INVALID_PASSWORD)

        logger.info("Login succeeded: user_id=%s username=%s", user.id, user.username)
        return AuthResult(user=user.public_view(), access_token=self.tokens.issue(user.claims()))

    def verify_and_refresh(self, token: str) -> VerifyResult:
        """Verify token and re-issue its claims with a new 24h window.

        The store is not consulted: the claims are trusted as of issuance
        time, so a token can carry a stale email until it expires.
        """
        claims, fresh = self.tokens.refresh(token)
        return VerifyResult(claims=claims, access_token=fresh)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(self, username: str) -> User | None:
        try:
            return self.store.get_by_username(username)
        except StoreError as exc:
            logger.error("Credential store lookup failed: %s", exc)
            raise StoreUnavailable() from exc
