from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import asyncio
import bcrypt
import secrets

from app.core.config import settings
from app.core.exceptions import InvalidTokenError

# Renewal tokens have a fixed lifetime, independent of ACCESS_TOKEN_EXPIRE_MINUTES
REFRESH_TOKEN_EXPIRE_DAYS = 30

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return get_password_hash(secrets.token_urlsafe(16))


async def hash_password_async(password: str) -> str:
    """Hash in a worker thread so bcrypt does not block the event loop"""
    return await asyncio.to_thread(get_password_hash, password)


async def verify_password_async(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify in a worker thread.

    A missing hash is still compared against a throwaway digest so the
    response time does not reveal whether the account exists.
    """
    if hashed_password is None:
        await asyncio.to_thread(verify_password, plain_password, _dummy_password_hash())
        return False
    return await asyncio.to_thread(verify_password, plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token carrying sub, email and role"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": ACCESS_TOKEN_TYPE})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def create_refresh_token(data: Dict[str, Any]) -> str:
    """Create JWT refresh token carrying only sub"""
    to_encode = {"sub": data["sub"]}
    expire = datetime.now(timezone.utc) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": REFRESH_TOKEN_TYPE})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Bad signature, malformed payload, elapsed expiry and wrong token type all
    raise the same InvalidTokenError.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except (JWTError, AttributeError, TypeError, ValueError):
        raise InvalidTokenError()

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise InvalidTokenError()

    return payload
