"""
Security utilities including password hashing and JWT token handling.
"""

import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from catalog_api.config import settings as default_settings, Settings
from catalog_api.core.exceptions import Forbidden

# Use bcrypt directly instead of passlib to avoid initialization issues
# passlib has problems with bcrypt 5.0.0+ during initialization

# JWT configuration
ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    # Ensure password is bytes for bcrypt
    if isinstance(plain_password, str):
        plain_password = plain_password.encode("utf-8")
    if isinstance(hashed_password, str):
        hashed_password = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Generate a password hash."""
    if isinstance(password, str):
        password = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password, salt)
    return hashed.decode("utf-8")


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Create a new JWT access token."""
    settings = settings or default_settings
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def issue_token(
    user_id: int, username: str, settings: Optional[Settings] = None
) -> str:
    """Issue a signed, time-limited token embedding userId and username."""
    return create_access_token(
        {"userId": user_id, "username": username}, settings=settings
    )


def verify_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Decode and verify a token issued by ``issue_token``.

    Returns:
        ``{"userId": int, "username": str}``

    Raises:
        Forbidden: bad signature, expired token or missing claims.
    """
    settings = settings or default_settings
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        # Covers ExpiredSignatureError as well
        raise Forbidden("Invalid or expired token")

    user_id = payload.get("userId")
    username = payload.get("username")
    if not isinstance(user_id, int) or not isinstance(username, str):
        raise Forbidden("Invalid or expired token")

    return {"userId": user_id, "username": username}
