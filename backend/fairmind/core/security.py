"""
Password hashing and access tokens
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from fairmind.core.config import settings
from fairmind.core.logging_config import get_logger

logger = get_logger(__name__)

TOKEN_COOKIE_NAME = "token"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(user_id: str, email: str) -> str:
    """Issue a signed token carrying the user's identity"""
    expires = datetime.now(timezone.utc) + timedelta(days=settings.TOKEN_EXPIRE_DAYS)
    payload = {"id": user_id, "email": email, "exp": expires}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id a token was issued for, or None if it is not valid"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("Rejected access token: %s", e)
        return None
    user_id = payload.get("id")
    return user_id if isinstance(user_id, str) else None
