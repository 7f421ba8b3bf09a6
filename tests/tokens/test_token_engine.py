from datetime import datetime, timedelta, timezone

import pytest

from src.qr_attendance.qr_attendance.core.exceptions import ConfigurationError
from src.qr_attendance.qr_attendance.tokens.engine import TOKEN_HEX_LENGTH, TokenEngine, derive_token

UTC = timezone.utc
T = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_derive_token_is_deterministic():
    assert derive_token("s1", T, b"k") == derive_token("s1", T, b"k")


def test_derive_token_is_fixed_length_hex():
    token = derive_token("s1", T, b"k")
    assert len(token) == TOKEN_HEX_LENGTH == 64
    int(token, 16)


def test_derive_token_depends_on_session_window_and_key():
    base = derive_token("s1", T, b"k")
    assert derive_token("s2", T, b"k") != base
    assert derive_token("s1", T + timedelta(minutes=5), b"k") != base
    assert derive_token("s1", T, b"other") != base


def test_issue_token_same_window_same_token():
    engine = TokenEngine("secret")
    first = engine.issue_token("s1", T + timedelta(minutes=1))
    second = engine.issue_token("s1", T + timedelta(minutes=4, seconds=59))
    assert first == second
    assert first.valid_from == T
    assert first.valid_to == T + timedelta(minutes=5)


def test_issued_token_serializes_iso_timestamps():
    issued = TokenEngine("secret").issue_token("s1", T + timedelta(minutes=2))
    body = issued.to_dict()
    assert body["validFrom"] == "2024-01-01T10:00:00Z"
    assert body["validTo"] == "2024-01-01T10:05:00Z"
    assert body["token"] == issued.token


def test_validate_accepts_token_anywhere_in_its_window():
    engine = TokenEngine("secret")
    token = engine.issue_token("s1", T).token
    assert engine.validate_token("s1", token, T)
    assert engine.validate_token("s1", token, T + timedelta(minutes=4, seconds=59))


def test_validate_rejects_neighbouring_windows():
    engine = TokenEngine("secret")
    token = engine.issue_token("s1", T + timedelta(minutes=2)).token
    assert not engine.validate_token("s1", token, T - timedelta(seconds=1))
    assert not engine.validate_token("s1", token, T + timedelta(minutes=5))


def test_validate_rejects_other_session():
    engine = TokenEngine("secret")
    token = engine.issue_token("s1", T).token
    assert not engine.validate_token("s2", token, T)


def test_validate_rejects_token_from_other_key():
    token = TokenEngine("secret-a").issue_token("s1", T).token
    assert not TokenEngine("secret-b").validate_token("s1", token, T)


@pytest.mark.parametrize("session_id", ["s1", "session-1", "0" * 36])
def test_validate_rejects_forged_zero_token(session_id):
    assert not TokenEngine("secret").validate_token(session_id, "0" * 64, T)


@pytest.mark.parametrize("presented", [None, "", "abc", "g" * 64, 12345, b"0" * 64, "é" * 64])
def test_validate_returns_false_for_malformed_input(presented):
    assert TokenEngine("secret").validate_token("s1", presented, T) is False


def test_grace_window_accepts_previous_window_only():
    engine = TokenEngine("secret", grace_windows=1)
    token = engine.issue_token("s1", T).token
    assert engine.validate_token("s1", token, T + timedelta(minutes=6))
    assert not engine.validate_token("s1", token, T + timedelta(minutes=10))
    assert not engine.validate_token("s1", token, T - timedelta(minutes=1))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"secret_key": ""},
        {"secret_key": "k", "window_minutes": 0},
        {"secret_key": "k", "grace_windows": -1},
    ],
)
def test_bad_configuration_is_rejected(kwargs):
    secret = kwargs.pop("secret_key")
    with pytest.raises(ConfigurationError):
        TokenEngine(secret, **kwargs)
