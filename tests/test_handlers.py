"""Unit tests for api/handlers.py -- the operation table and dispatch().

No HTTP involved: these call dispatch() the way a message-bus adapter would,
with a pattern name and a decoded JSON payload.
"""

import pytest

from api.handlers import LOGIN, OPERATIONS, REGISTER, VERIFY, dispatch
from auth.errors import InvalidCredentials, InvalidPayload, InvalidToken, UnknownOperation, UserAlreadyExists


def test_table_exposes_three_operations():
    assert set(OPERATIONS) == {"auth.login.user", "auth.register.user", "auth.verify.user"}


class TestDispatch:
    def test_register_shape(self, service):
        out = dispatch(service, REGISTER, {"username": "alice", "password": "pw123", "email": "alice@x.com"})

        assert set(out) == {"user", "accessToken"}
        assert set(out["user"]) == {"id", "username", "email", "createdAt"}
        assert out["user"]["username"] == "alice"
        assert "password" not in str(out["user"]).lower()

    def test_login_shape(self, service):
        dispatch(service, REGISTER, {"username": "alice", "password": "pw123", "email": "alice@x.com"})
        out = dispatch(service, LOGIN, {"username": "alice", "password": "pw123"})

        assert out["user"]["email"] == "alice@x.com"
        assert out["accessToken"]

    def test_verify_shape(self, service):
        registered = dispatch(service, REGISTER, {"username": "alice", "password": "pw123", "email": "alice@x.com"})
        out = dispatch(service, VERIFY, {"accessToken": registered["accessToken"]})

        assert out["user"] == {
            "userId": registered["user"]["id"],
            "username": "alice",
            "email": "alice@x.com",
        }
        assert out["accessToken"]

    def test_unknown_pattern(self, service):
        with pytest.raises(UnknownOperation) as exc_info:
            dispatch(service, "auth.delete.user", {})
        assert exc_info.value.pattern == "auth.delete.user"

    @pytest.mark.parametrize(
        "pattern, payload",
        [
            (LOGIN, {"username": "alice"}),
            (LOGIN, {"username": "", "password": "pw"}),
            (REGISTER, {"username": "alice", "password": "pw123", "email": "not-an-email"}),
            (VERIFY, {}),
            (VERIFY, "just-a-string"),
            (LOGIN, None),
        ],
    )
    def test_invalid_payload(self, service, pattern, payload):
        with pytest.raises(InvalidPayload):
            dispatch(service, pattern, payload)

    def test_invalid_payload_does_not_echo_password(self, service):
        with pytest.raises(InvalidPayload) as exc_info:
            dispatch(service, LOGIN, {"username": "alice", "password": "x" * 200})
        assert "xxxx" not in exc_info.value.message
        assert "password" in exc_info.value.message

    def test_domain_errors_propagate(self, service):
        dispatch(service, REGISTER, {"username": "alice", "password": "pw123", "email": "alice@x.com"})

        with pytest.raises(UserAlreadyExists):
            dispatch(service, REGISTER, {"username": "alice", "password": "pw123", "email": "alice@x.com"})
        with pytest.raises(InvalidCredentials):
            dispatch(service, LOGIN, {"username": "alice", "password": "nope"})
        with pytest.raises(InvalidToken):
            dispatch(service, VERIFY, {"accessToken": "garbage"})
