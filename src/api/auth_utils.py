import os
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt

# Tokens are issued by the identity provider and signed with the shared secret
SECRET_KEY = os.environ.get("TIPA_SECRET_KEY", "dev-secret-unsafe")
ALGORITHM = "HS256"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
    now_utc: datetime | None = None,
    secret_key: str | None = None,
) -> str:
    """
    Create a JWT access token (dev tooling and tests).

    Args:
        data: Claims to encode in the token; "sub" is the member id
        expires_delta: Optional custom expiration delta (default 15 minutes)
        now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
        secret_key: Signing secret, defaults to TIPA_SECRET_KEY
    """
    to_encode = data.copy()
    current_time = now_utc if now_utc is not None else datetime.now(UTC)
    to_encode.update({"exp": current_time + (expires_delta or timedelta(minutes=15))})
    encoded_jwt: str = jwt.encode(to_encode, secret_key or SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str, secret_key: str | None = None) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(token, secret_key or SECRET_KEY, algorithms=[ALGORITHM])
        return cast(dict[str, Any], payload)
    except jwt.JWTError:
        return None
