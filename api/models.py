"""
API request and response models for the auth service.

These Pydantic v2 models define the wire contract shared by every transport
binding (the HTTP routes and the message-style /rpc entry point). They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. api/handlers.py maps between the two.

Wire fields are camelCase (accessToken, userId, createdAt) to match the
message contract existing clients already speak. populate_by_name=True lets
Python code build models with snake_case names.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import AuthResult, PublicUser, VerifyResult

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Characters, not bytes. PasswordHasher cuts the encoded form to 72 bytes.
_MAX_PASSWORD_LENGTH = 72
_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Payload of the login operation. Passwords are taken verbatim, whitespace included."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=_MAX_PASSWORD_LENGTH)


class RegisterRequest(BaseModel):
    """Payload of the register operation."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=_MAX_PASSWORD_LENGTH)
    email: str = Field(max_length=255, pattern=_EMAIL_PATTERN)


class VerifyRequest(BaseModel):
    """Payload of the verify operation: {"accessToken": "..."}."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    access_token: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user record. Never carries the password hash."""

    model_config = _WIRE_CONFIG

    id: Optional[str]
    username: str
    email: str
    created_at: Optional[str] = None

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserResponse":
        return cls(id=user.id, username=user.username, email=user.email, created_at=user.created_at)


class AuthResponse(BaseModel):
    """Response of login and register."""

    model_config = _WIRE_CONFIG

    user: UserResponse
    access_token: str

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(user=UserResponse.from_public(result.user), access_token=result.access_token)


class ClaimsResponse(BaseModel):
    """Identity claims as signed into a token."""

    model_config = _WIRE_CONFIG

    user_id: str
    username: str
    email: str


class VerifyResponse(BaseModel):
    """Response of verify: the token's claims plus a refreshed token."""

    model_config = _WIRE_CONFIG

    user: ClaimsResponse
    access_token: str

    @classmethod
    def from_result(cls, result: VerifyResult) -> "VerifyResponse":
        return cls(user=ClaimsResponse(**result.claims), access_token=result.access_token)


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    retryable: bool = False
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
