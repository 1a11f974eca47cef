"""
api/routes/v1/auth.py -- HTTP binding of the auth operations.

Routes:
  POST /api/v1/auth/login       -- auth.login.user
  POST /api/v1/auth/register    -- auth.register.user
  POST /api/v1/auth/verify      -- auth.verify.user
  POST /api/v1/rpc/auth.login.user -- auth.login.user, rate-limited with /auth/login
  POST /api/v1/rpc/{pattern}    -- any operation by pattern name, raw JSON payload

The first three give typed OpenAPI docs. /rpc/{pattern} is the message-style
entry point: it takes the same payload a bus subscriber would receive and goes
through api.handlers.dispatch(), so both paths share one operation table.

Handlers are plain def functions. FastAPI runs them in its thread pool, which
keeps bcrypt's CPU work off the event loop.

Security:
  Login is rate-limited per client IP (LOGIN_RATE_LIMIT). POST /auth/login and
  POST /rpc/auth.login.user draw from one shared budget.
  Cache-Control: no-store on every response carrying a token.
  Error rendering lives in api/main.py -- routes just let AuthError propagate.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from api import handlers
from api.limiter import LOGIN_SCOPE, limiter, login_rate_limit
from api.models import AuthResponse, LoginRequest, RegisterRequest, VerifyRequest, VerifyResponse
from auth.service import AuthService

router = APIRouter()


def _service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _token_response(content: dict[str, Any], status_code: int = 200) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=content)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/login", response_model=AuthResponse)
@limiter.shared_limit(login_rate_limit, scope=LOGIN_SCOPE)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Check username and password; return the public user view and a token.

    Unknown username and wrong password return the same 400 INVALID_CREDENTIALS.
    """
    result = handlers.login(_service(request), body)
    return _token_response(result.model_dump(by_alias=True))


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account; return the public user view and a token."""
    result = handlers.register(_service(request), body)
    return _token_response(result.model_dump(by_alias=True), status_code=201)


@router.post("/auth/verify", response_model=VerifyResponse)
def verify(request: Request, body: VerifyRequest) -> JSONResponse:
    """Verify a token; return its claims and a refreshed token. 401 on any failure."""
    result = handlers.verify(_service(request), body)
    return _token_response(result.model_dump(by_alias=True))


# Registered before /rpc/{pattern} so login by pattern name cannot bypass the limit.
@router.post(f"/rpc/{handlers.LOGIN}")
@limiter.shared_limit(login_rate_limit, scope=LOGIN_SCOPE)
def rpc_login(request: Request, payload: Any = Body(default=None)) -> JSONResponse:
    """auth.login.user through the message-style entry point."""
    return _token_response(handlers.dispatch(_service(request), handlers.LOGIN, payload))


@router.post("/rpc/{pattern}")
def rpc(request: Request, pattern: str, payload: Any = Body(default=None)) -> JSONResponse:
    """Run any operation by its pattern name (e.g. auth.login.user)."""
    return _token_response(handlers.dispatch(_service(request), pattern, payload))
