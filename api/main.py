"""
api/main.py -- FastAPI application entry point for the auth service.

Exposes the three auth operations (login, register, verify) over HTTP, plus
a message-style /rpc/{pattern} route and a health probe.

Run with:  python main.py serve
           uvicorn api.main:app --port 3000

Middleware stack (outermost to innermost):
  1. log_requests      -- one access-log line per request with latency
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan builds the collaborators once from Settings and injects them:
  UserStore(database_url) + PasswordHasher() + TokenService(jwt_secret)
    -> AuthService -> app.state.auth_service
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.handlers import describe_validation_error
from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from auth.errors import AuthError, InternalError, InvalidPayload
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("authservice.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def build_service(user_store: UserStore, jwt_secret: str) -> AuthService:
    """Wire the auth core from its collaborators."""
    return AuthService(store=user_store, hasher=PasswordHasher(), tokens=TokenService(secret_key=jwt_secret))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the store and auth core on startup; dispose the store on shutdown.

    Settings are read exactly once here. A missing or short JWT_SECRET
    raises during startup, so the process never serves with a bad secret.
    """
    settings = get_settings()
    logging.getLogger("authservice").setLevel(settings.log_level.upper())
    logger.info("Auth service starting up (port=%d)", settings.port)
    if settings.nats_servers:
        logger.info("Configured brokers: %s", ", ".join(settings.nats_servers))

    app.state.user_store = UserStore(settings.database_url, timeout=settings.db_timeout_seconds)
    app.state.auth_service = build_service(app.state.user_store, settings.jwt_secret)
    logger.info("Credential store initialized")

    yield

    app.state.user_store.close()
    logger.info("Auth service shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Auth Service",
    description="Registers users, validates credentials, and issues/verifies signed session tokens.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render any auth failure as {"error": {code, message, retryable}}.

    Internal errors are logged with their cause chain; the response carries
    only the generic message.
    """
    if isinstance(exc, InternalError):
        logger.warning("%s on %s %s", exc.code, request.method, request.url.path, exc_info=exc.__cause__)
    return JSONResponse(status_code=int(exc.status_code), content={"error": exc.to_dict()})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="RATE_LIMITED",
                message="Too many requests.",
                retryable=True,
                detail=str(exc.detail),
            )
        ).model_dump(exclude_none=True),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 in the same shape dispatch() uses for InvalidPayload.

    exc.errors() carries the raw input; only field locations and messages
    are rendered so a rejected password never ends up in a response.
    """
    error = InvalidPayload(f"Request validation failed: {describe_validation_error(exc)}")
    return JSONResponse(status_code=int(error.status_code), content={"error": error.to_dict()})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(exclude_none=True),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred.",
                retryable=True,
            )
        ).model_dump(exclude_none=True),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# No rate limit applied -- health checks must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version and a database probe."""
    db_ok = request.app.state.user_store.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
