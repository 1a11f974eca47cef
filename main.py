#!/usr/bin/env python3
"""
Auth Service -- user registration, credential checks, and session tokens.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 3000
  python main.py create-user alice alice@example.com
  python main.py verify-token eyJhbGciOi...

Environment variables:
  JWT_SECRET     Token signing secret, at least 32 characters. Required unless DEBUG=true.
  PORT           Listening port for `serve` (default 3000).
  NATS_SERVERS   Comma-separated broker addresses.
  DATABASE_URL   SQLAlchemy URL of the credential store (default: sqlite file under auth/).
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.errors import AuthError
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings


def _build_service() -> tuple[AuthService, UserStore]:
    settings = get_settings()
    store = UserStore(settings.database_url, timeout=settings.db_timeout_seconds)
    service = AuthService(store=store, hasher=PasswordHasher(), tokens=TokenService(secret_key=settings.jwt_secret))
    return service, store


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    port = args.port or get_settings().port
    uvicorn.run("api.main:app", host=args.host, port=port, log_level="info")
    return 0


def _create_user(args: argparse.Namespace) -> int:
    """Register a user from the terminal. The password is read without echo."""
    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("  [!] Password must not be empty.")
        return 2

    service, store = _build_service()
    try:
        result = service.register(args.username, args.email, password)
    except AuthError as e:
        print(f"  [!] {e.code}: {e.message}")
        return 1
    finally:
        store.close()

    print(f"  Created user {result.user.username} (id={result.user.id}, email={result.user.email})")
    if args.show_token:
        print(result.access_token)
    return 0


def _verify_token(args: argparse.Namespace) -> int:
    tokens = TokenService(secret_key=get_settings().jwt_secret)
    try:
        claims = tokens.verify(args.token)
    except AuthError as e:
        print(f"  [!] {e.code}: {e.message}")
        return 1

    for key, value in claims.items():
        print(f"  {key:<10} {value}")
    print(f"  {'expires':<10} {tokens.expires_at(args.token).isoformat()}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="auth-service",
        description="Register users, check credentials, and issue signed session tokens.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  JWT_SECRET=... python main.py serve
  DEBUG=true python main.py serve --port 8080
  python main.py create-user alice alice@example.com
  python main.py verify-token "$TOKEN"
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP service with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Listening port (default: PORT or 3000)")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Register a user from the terminal")
    create.add_argument("username")
    create.add_argument("email")
    create.add_argument(
        "--password",
        default=None,
        help="Password (prompted without echo when omitted; avoid passing it on shared machines)",
    )
    create.add_argument("--show-token", action="store_true", help="Print the issued access token")
    create.set_defaults(func=_create_user)

    verify = sub.add_parser("verify-token", help="Print the claims of a session token")
    verify.add_argument("token")
    verify.set_defaults(func=_verify_token)

    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
