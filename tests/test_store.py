"""Unit tests for auth/store.py -- UserStore against in-memory SQLite.

Covers:
- create_user assigns an opaque id and created_at
- get_by_username / get_by_id round trip and misses
- UNIQUE(username) surfaces as DuplicateUsernameError and keeps the first record
- driver failures surface as StoreError
"""

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from auth.models import User
from auth.store import DuplicateUsernameError, StoreError, UserStore


def _user(username: str = "alice", email: str = "alice@x.com") -> User:
    return User(username=username, email=email, hashed_password="$2b$04$placeholderhashplaceholderhashplaceholde")


class TestCreate:
    def test_create_assigns_uuid_and_timestamp(self, store):
        created = store.create_user(_user())
        assert uuid.UUID(created.id).version == 4
        assert created.created_at
        assert created.username == "alice"

    def test_ids_are_unique(self, store):
        a = store.create_user(_user("a"))
        b = store.create_user(_user("b"))
        assert a.id != b.id

    def test_duplicate_username_rejected(self, store):
        first = store.create_user(_user(email="first@x.com"))
        with pytest.raises(DuplicateUsernameError):
            store.create_user(_user(email="second@x.com"))

        assert store.count_users() == 1
        assert store.get_by_username("alice").email == first.email

    def test_duplicate_is_a_store_error(self):
        assert issubclass(DuplicateUsernameError, StoreError)

    def test_username_is_case_sensitive(self, store):
        store.create_user(_user("alice"))
        store.create_user(_user("Alice"))
        assert store.count_users() == 2


class TestLookup:
    def test_get_by_username(self, store):
        created = store.create_user(_user())
        found = store.get_by_username("alice")
        assert found == created

    def test_get_by_username_missing(self, store):
        assert store.get_by_username("nobody") is None

    def test_get_by_id(self, store):
        created = store.create_user(_user())
        assert store.get_by_id(created.id) == created

    def test_get_by_id_missing(self, store):
        assert store.get_by_id(str(uuid.uuid4())) is None

    def test_ping(self, store):
        assert store.ping() is True


class TestFailures:
    def test_lookup_failure_wrapped(self, store, monkeypatch):
        broken = MagicMock()
        broken.connect.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
        monkeypatch.setattr(store, "engine", broken)
        with pytest.raises(StoreError) as exc_info:
            store.get_by_username("alice")
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_insert_failure_wrapped(self, store, monkeypatch):
        broken = MagicMock()
        broken.connect.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))
        monkeypatch.setattr(store, "engine", broken)
        with pytest.raises(StoreError) as exc_info:
            store.create_user(_user())
        assert not isinstance(exc_info.value, DuplicateUsernameError)

    def test_ping_reports_failure(self, store, monkeypatch):
        broken = MagicMock()
        broken.connect.side_effect = OperationalError("SELECT 1", {}, Exception("gone"))
        monkeypatch.setattr(store, "engine", broken)
        assert store.ping() is False


def test_file_database_persists_across_instances(tmp_path):
    url = f"sqlite:///{tmp_path / 'users.db'}"
    first = UserStore(url)
    created = first.create_user(_user())
    first.close()

    second = UserStore(url)
    try:
        assert second.get_by_id(created.id) == created
    finally:
        second.close()
