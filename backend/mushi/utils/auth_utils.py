# mushi/utils/auth_utils.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from mushi.core.config import settings


def create_access_token(data: dict, expires_delta: timedelta = timedelta(hours=1)) -> str:
    """
    Issue a session token. Sessions come from the auth provider in
    production; this is used by tests and local tooling.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({
        "exp": expire,
        "type": "access"
    })
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, expected_type: str = "access", secret: Optional[str] = None) -> dict:
    """
    Decode and verify a session token. Raises jwt.InvalidTokenError
    (ExpiredSignatureError included) on anything unusable.
    """
    decoded = jwt.decode(token, secret or settings.JWT_SECRET_KEY, algorithms=[settings.ALGORITHM])
    if decoded.get("type", expected_type) != expected_type:
        raise jwt.InvalidTokenError(f"Invalid token type: expected {expected_type}")
    if not decoded.get("sub"):
        raise jwt.InvalidTokenError("Token has no subject")
    return decoded
