# inventory_api/core/security.py

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from passlib.context import CryptContext
from jose import jwt, JWTError

from inventory_api.core.config import (
    JWT_ACCESS_SECRET_KEY,
    JWT_REFRESH_SECRET_KEY,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from inventory_api.constants.error_codes import ErrorCode
from inventory_api.core.exceptions import Unauthenticated

# =====================================================
# PASSWORD HASHING
# =====================================================
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

# =====================================================
# ACCESS TOKEN
# =====================================================
def create_access_token(
    subject: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta
        else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    payload = {
        "sub": subject,
        "role": role,
        "type": "access",
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(payload, JWT_ACCESS_SECRET_KEY, algorithm=JWT_ALGORITHM)

# =====================================================
# REFRESH TOKEN
# =====================================================
def create_refresh_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, datetime]:
    """Returns the signed token and its expiry (persisted alongside it)."""
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta
        else timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    )

    payload = {
        "sub": subject,
        "type": "refresh",
        # unique per issue, so two refreshes in the same second never collide
        "jti": secrets.token_hex(16),
        "iat": now,
        "exp": expire,
    }

    token = jwt.encode(payload, JWT_REFRESH_SECRET_KEY, algorithm=JWT_ALGORITHM)
    return token, expire

# =====================================================
# DECODE + VALIDATE TOKEN
# =====================================================
def _decode(token: str, secret: str, expected_type: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
        )
    except JWTError:
        raise Unauthenticated("Invalid or expired token")

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise Unauthenticated("Invalid token type")

    return payload


def decode_access_token(token: str) -> dict:
    return _decode(token, JWT_ACCESS_SECRET_KEY, "access")


def decode_refresh_token(token: str) -> dict:
    try:
        return _decode(token, JWT_REFRESH_SECRET_KEY, "refresh")
    except Unauthenticated:
        raise Unauthenticated(
            "Refresh token is invalid or expired. Please login again.",
            ErrorCode.INVALID_REFRESH_TOKEN,
        )
