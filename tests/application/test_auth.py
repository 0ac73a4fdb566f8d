from datetime import timedelta

import pytest

from flashdeck.application.auth import SessionManager, bearer_token


@pytest.fixture
def sessions():
    return SessionManager(
        username="admin",
        password="secret",
        secret="signing-key",
        max_age=3600,
        api_token="tok-123",
    )


def test_validate_credentials(sessions):
    assert sessions.validate_credentials("admin", "secret")
    assert not sessions.validate_credentials("admin", "wrong")
    assert not sessions.validate_credentials("root", "secret")
    assert not sessions.validate_credentials("admin", "sécret")


def test_session_roundtrip(sessions, t0):
    token = sessions.create_session("admin", t0)
    assert sessions.verify_session(token, t0 + timedelta(minutes=5)) == "admin"


def test_session_expires(sessions, t0):
    token = sessions.create_session("admin", t0)
    assert sessions.verify_session(token, t0 + timedelta(seconds=3601)) is None


def test_forged_session_rejected(sessions, t0):
    token = sessions.create_session("admin", t0)
    payload, _ = token.rsplit(".", 1)
    assert sessions.verify_session(f"{payload}.{'0' * 64}", t0) is None

    other = SessionManager("admin", "secret", "other-key", 3600)
    assert other.verify_session(token, t0) is None


@pytest.mark.parametrize("token", [None, "", "no-dot", "!!!.abc", "e30.abc"])
def test_malformed_session_rejected(sessions, t0, token):
    assert sessions.verify_session(token, t0) is None


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer tok-123", "tok-123"),
        ("Bearer   tok-123  ", "tok-123"),
        ("bearer tok-123", None),
        ("Basic abc", None),
        ("Bearer", None),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_check_auth(sessions, t0):
    token = sessions.create_session("admin", t0)

    assert sessions.check_auth(token, None, t0)
    assert sessions.check_auth(None, "Bearer tok-123", t0)
    assert sessions.check_auth("garbage", "Bearer tok-123", t0)
    assert not sessions.check_auth(None, "Bearer nope", t0)
    assert not sessions.check_auth(None, None, t0)


def test_api_token_disabled_when_unset(t0):
    sessions = SessionManager("admin", "secret", "key", 3600, api_token=None)
    assert not sessions.check_auth(None, "Bearer ", t0)
    assert not sessions.validate_api_token("anything")
