"""
Password hashing and access tokens
"""
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import jwt
from nxtbeings.core.config import settings
from nxtbeings.utils.datetime_utils import utcnow


def _password_bytes(password: str) -> bytes:
    # bcrypt only uses the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


def create_access_token(user_id: int, user_type: str, expires_minutes: Optional[int] = None) -> str:
    """Signed JWT carrying the user id and account type"""
    if expires_minutes is None:
        expires_minutes = settings.JWT_EXPIRES_MINUTES
    now = utcnow()
    payload = {
        "sub": str(user_id),
        "userType": user_type,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Return the token payload

    Raises ExpiredSignatureError for expired tokens and JWTError for anything else invalid
    """
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
