from datetime import UTC, datetime, timedelta

from src.api.auth_utils import create_access_token, decode_access_token


def test_round_trip_with_explicit_secret():
    token = create_access_token({"sub": "abc"}, secret_key="k1")
    payload = decode_access_token(token, "k1")
    assert payload is not None
    assert payload["sub"] == "abc"


def test_wrong_secret_rejected():
    token = create_access_token({"sub": "abc"}, secret_key="k1")
    assert decode_access_token(token, "k2") is None


def test_expired_token_rejected():
    issued = datetime.now(UTC) - timedelta(hours=2)
    token = create_access_token(
        {"sub": "abc"}, expires_delta=timedelta(minutes=5), now_utc=issued, secret_key="k1"
    )
    assert decode_access_token(token, "k1") is None


def test_garbage_rejected():
    assert decode_access_token("not.a.jwt", "k1") is None
