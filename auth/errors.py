"""
auth/errors.py -- Error taxonomy for the auth service.

Every failure that leaves the auth core is an AuthError. The transport layer
renders any AuthError as the same envelope:

    {"error": {"code": "INVALID_TOKEN", "message": "Invalid token", "retryable": false}}

and uses status_code for the protocol status.

Two families:
  DomainError   -- the caller did something the service refuses (bad
                   credentials, taken username, bad token). Retrying the same
                   request will fail the same way.
  InternalError -- the service could not do its job (store down, insert
                   failed). retryable=True so clients can back off and retry
                   instead of surfacing the message to the user.

Layer rule: stdlib only. No imports from api/, core/, or third-party libraries.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class AuthError(Exception):
    """Base class for all caller-visible auth failures."""

    code: str = "AUTH_ERROR"
    message: str = "Authentication error"
    status_code: HTTPStatus = HTTPStatus.BAD_REQUEST
    retryable: bool = False

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


class DomainError(AuthError):
    """Refusal caused by the request itself."""


class InternalError(AuthError):
    """Failure inside the service or one of its collaborators."""

    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    retryable = True


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


class InvalidCredentials(DomainError):
    """Unknown username or wrong password.

    Both cases produce the same code and message so a caller cannot probe
    which usernames exist. ``reason`` keeps the distinction for server-side
    logs only and is deliberately left out of to_dict().
    """

    NOT_FOUND = "NOT_FOUND"
    INVALID_PASSWORD = "INVALID_PASSWORD"

    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__()


class UserAlreadyExists(DomainError):
    code = "USER_EXISTS"
    message = "User already exists"
    status_code = HTTPStatus.BAD_REQUEST


class InvalidToken(DomainError):
    """Token failed verification. Expired, tampered and malformed look identical."""

    code = "INVALID_TOKEN"
    message = "Invalid token"
    status_code = HTTPStatus.UNAUTHORIZED


class InvalidPayload(DomainError):
    code = "VALIDATION_ERROR"
    message = "Request validation failed"
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY


class UnknownOperation(DomainError):
    code = "UNKNOWN_OPERATION"
    message = "Unknown operation"
    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Unknown operation: {pattern}")


# ---------------------------------------------------------------------------
# Internal errors
# ---------------------------------------------------------------------------


class RegistrationFailed(InternalError):
    code = "REGISTRATION_FAILED"
    message = "Error creating user"


class StoreUnavailable(InternalError):
    code = "STORE_UNAVAILABLE"
    message = "Credential store unavailable"
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
