"""
Security Service

Password hashing and JWT access tokens.

- Passwords: bcrypt via passlib's CryptContext
- Tokens: HS256 JWT (python-jose) with
    sub  = user id (string, per RFC 7519)
    type = "access"
    exp  = now + ACCESS_TOKEN_EXPIRE_MINUTES

Usage:
    from app.services.security import create_access_token, decode_access_token

    token = create_access_token(user.id)
    user_id = decode_access_token(token)   # None if invalid/expired
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_TYPE = "access"

# deprecated="auto": hashes made with older schemes get upgraded on login
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Example:
        >>> hash_password("secret123").startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time check of a password against its bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: Becomes the `sub` claim
        expires_delta: Optional custom lifetime (defaults to settings)

    Returns:
        Encoded JWT string (header.payload.signature)
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "exp": datetime.now(UTC) + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> int | None:
    """
    Validate an access token and return the user id it was issued for.

    Returns:
        The user id, or None if the token is malformed, expired, signed
        with another key, or not an access token
    """
    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE:
        logger.warning("Token type mismatch: expected access")
        return None

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Token has no usable subject")
        return None
