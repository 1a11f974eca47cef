"""
auth/store.py -- SQLAlchemy Core persistence layer for user records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. The auth core and
the routes never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(username) is the authoritative uniqueness guarantee. The service's
  look-up-then-create sequence is only a fast path; two concurrent
  registrations for the same username both pass the look-up, and the second
  insert fails here with DuplicateUsernameError.

Errors:
  The store raises only StoreError (and its DuplicateUsernameError subclass).
  Driver exceptions are chained, never leaked to callers directly.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),  # UUID4, generated by the store
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


class StoreError(Exception):
    """The credential store could not complete an operation."""


class DuplicateUsernameError(StoreError):
    """Insert rejected by the UNIQUE(username) constraint."""


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///:memory:")
        user = store.create_user(User(username="alice", email="a@x.com", hashed_password=h))
        store.get_by_username("alice")
        store.close()

    timeout bounds every store call: it is the SQLite busy timeout, or the
    pool checkout timeout for server databases.
    """

    def __init__(self, db_url: str, timeout: float = 5.0) -> None:
        connect_args: dict = {}
        engine_kwargs: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            connect_args["timeout"] = timeout
        else:
            engine_kwargs["pool_timeout"] = timeout
            engine_kwargs["pool_pre_ping"] = True
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        try:
            _metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError("Could not initialize user table") from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(_users).where(_users.c.username == username)).fetchone()
        except SQLAlchemyError as exc:
            raise StoreError("User lookup failed") from exc
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(_users).where(_users.c.id == user_id)).fetchone()
        except SQLAlchemyError as exc:
            raise StoreError("User lookup failed") from exc
        return _row_to_user(row) if row is not None else None

    def create_user(self, user: User) -> User:
        """Insert a new user and return the stored record with id and created_at set.

        Raises DuplicateUsernameError if the username is already taken.
        """
        record = User(
            id=str(uuid.uuid4()),
            username=user.username,
            email=user.email,
            hashed_password=user.hashed_password,
            created_at=_now_iso(),
        )
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _users.insert().values(
                        id=record.id,
                        username=record.username,
                        email=record.email,
                        hashed_password=record.hashed_password,
                        created_at=record.created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateUsernameError(f"Username already taken: {user.username}") from exc
        except SQLAlchemyError as exc:
            raise StoreError("User insert failed") from exc
        return record

    def count_users(self) -> int:
        """Return the number of stored users."""
        try:
            with self.engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(_users)).scalar() or 0
        except SQLAlchemyError as exc:
            raise StoreError("User count failed") from exc

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        try:
            with self.engine.connect() as conn:
                conn.execute(select(1))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
