"""
api/handlers.py -- The operation table: the service's transport-independent surface.

Three named operations, request/response, no streaming:

  auth.login.user     {username, password}          -> {user, accessToken}
  auth.register.user  {username, password, email}   -> {user, accessToken}
  auth.verify.user    {accessToken}                 -> {user (claims), accessToken}

OPERATIONS maps each pattern name to (request model, handler). dispatch() is
what a transport adapter calls with a raw decoded message; the HTTP routes in
api/routes/v1/auth.py call the handlers directly with bodies FastAPI has
already validated. Nothing here knows about HTTP, sockets or brokers.

Failures propagate as AuthError. Payload validation failures become
InvalidPayload; the message names the offending fields but never echoes their
values (a bad payload may contain a password).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NamedTuple

from pydantic import BaseModel, ValidationError

from api.models import AuthResponse, LoginRequest, RegisterRequest, VerifyRequest, VerifyResponse
from auth.errors import InvalidPayload, UnknownOperation
from auth.service import AuthService

LOGIN = "auth.login.user"
REGISTER = "auth.register.user"
VERIFY = "auth.verify.user"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def login(service: AuthService, body: LoginRequest) -> AuthResponse:
    return AuthResponse.from_result(service.login(body.username, body.password))


def register(service: AuthService, body: RegisterRequest) -> AuthResponse:
    return AuthResponse.from_result(service.register(body.username, body.email, body.password))


def verify(service: AuthService, body: VerifyRequest) -> VerifyResponse:
    return VerifyResponse.from_result(service.verify_and_refresh(body.access_token))


# ---------------------------------------------------------------------------
# Operation table
# ---------------------------------------------------------------------------


class Operation(NamedTuple):
    request_model: type[BaseModel]
    handler: Callable[[AuthService, Any], BaseModel]


OPERATIONS: dict[str, Operation] = {
    LOGIN: Operation(LoginRequest, login),
    REGISTER: Operation(RegisterRequest, register),
    VERIFY: Operation(VerifyRequest, verify),
}


def describe_validation_error(exc) -> str:
    """Summarize a pydantic or FastAPI validation error as "field: reason" pairs, without input values."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{location}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def dispatch(service: AuthService, pattern: str, payload: Any) -> dict[str, Any]:
    """Run the operation named pattern on a decoded message payload.

    Returns the JSON-ready response dict (camelCase keys).
    Raises UnknownOperation, InvalidPayload, or any AuthError from the service.
    """
    operation = OPERATIONS.get(pattern)
    if operation is None:
        raise UnknownOperation(pattern)
    try:
        body = operation.request_model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayload(f"Request validation failed: {describe_validation_error(exc)}") from exc
    return operation.handler(service, body).model_dump(by_alias=True)
