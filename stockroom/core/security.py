from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
import uuid

from jose import jwt, JWTError

from stockroom.core.config import settings


def create_access_token(subject: Union[str, Any], expires_delta: timedelta = None) -> tuple[str, str]:
    """Create an access token.

    Tokens are normally issued by the identity provider that shares
    ``SECRET_KEY``; this helper produces the same shape.

    Args:
        subject: token subject (the user id)
        expires_delta: lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        tuple: (encoded token, token id)
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    token_id = str(uuid.uuid4())
    to_encode = {
        "exp": expire,
        "iat": now,
        "sub": str(subject),
        "type": "access",
        "jti": token_id,
    }
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt, token_id


def decode_access_token(token: str) -> dict:
    """Decode and verify a token, raising ``JWTError`` when it is invalid."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type", "access") != "access":
        raise JWTError("Not an access token")
    return payload


def get_token_id(token: str) -> Optional[str]:
    """Return the ``jti`` claim without verifying the signature."""
    try:
        payload = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    return payload.get("jti")
