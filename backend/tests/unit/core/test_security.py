"""
Unit Tests for Security Module
Tests for: password hashing, JWT access and refresh tokens
"""
import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from app.core.security import (
    verify_password,
    get_password_hash,
    hash_password_async,
    verify_password_async,
    create_access_token,
    create_refresh_token,
    decode_token,
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
)
from app.core.exceptions import AuthenticationError, InvalidTokenError
from app.core.config import settings


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        """Test that hashing returns a different value than input"""
        password = "Testpassword1!"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Test that hashing same password returns different hashes"""
        password = "Testpassword1!"

        # Bcrypt generates different salts
        assert get_password_hash(password) != get_password_hash(password)

    def test_verify_password_correct(self):
        """Test verifying correct password"""
        hashed = get_password_hash("Testpassword1!")

        assert verify_password("Testpassword1!", hashed) is True

    def test_verify_password_incorrect(self):
        """Test verifying incorrect password"""
        hashed = get_password_hash("Testpassword1!")

        assert verify_password("wrongpassword", hashed) is False

    def test_long_password_truncated_to_72_bytes(self):
        """Bcrypt only considers the first 72 bytes"""
        base = "A1!" + "x" * 80
        hashed = get_password_hash(base)

        assert verify_password(base[:72] + "different-tail", hashed) is True

    async def test_async_helpers_round_trip(self):
        """Hashing and checking off the event loop behave like the sync versions"""
        hashed = await hash_password_async("Abcdef1!")

        assert await verify_password_async("Abcdef1!", hashed) is True
        assert await verify_password_async("Abcdef1?", hashed) is False

    async def test_missing_hash_never_verifies(self):
        """A missing account still runs a comparison and fails"""
        assert await verify_password_async("Abcdef1!", None) is False


class TestAccessToken:
    """Test JWT access token functions"""

    def test_create_access_token(self):
        """Test creating access token"""
        token = create_access_token({"sub": "user-123", "email": "a@x.com", "role": "student"})

        assert isinstance(token, str)
        assert token.count(".") == 2

    def test_access_token_contains_claims(self):
        """Test that access token contains the expected claims"""
        token = create_access_token({"sub": "user-123", "email": "a@x.com", "role": "teacher"})

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        assert payload["sub"] == "user-123"
        assert payload["email"] == "a@x.com"
        assert payload["role"] == "teacher"
        assert payload["type"] == ACCESS_TOKEN_TYPE
        assert "exp" in payload

    def test_access_token_custom_expiry(self):
        """Test access token with custom expiry"""
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(minutes=5))

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)

        assert exp - datetime.now(timezone.utc) <= timedelta(minutes=5)

    def test_access_token_default_expiry_is_seven_days(self):
        token = create_access_token({"sub": "user-123"})

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)

        assert timedelta(days=6, hours=23) < exp - datetime.now(timezone.utc) <= timedelta(days=7)


class TestRefreshToken:
    """Test JWT refresh token functions"""

    def test_refresh_token_carries_only_subject(self):
        token = create_refresh_token({"sub": "user-123", "email": "a@x.com", "role": "admin"})

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        assert payload["sub"] == "user-123"
        assert payload["type"] == REFRESH_TOKEN_TYPE
        assert "email" not in payload
        assert "role" not in payload


class TestDecodeToken:
    """Every verification failure collapses to InvalidTokenError"""

    def test_decode_valid_access_token(self):
        token = create_access_token({"sub": "user-123", "role": "student"})

        payload = decode_token(token)

        assert payload["sub"] == "user-123"

    def test_decode_expired_token(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-10))

        with pytest.raises(InvalidTokenError) as exc_info:
            decode_token(token)

        assert exc_info.value.code == "AUTHENTICATION_ERROR"
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid or expired token"

    def test_decode_tampered_signature(self):
        token = jwt.encode(
            {"sub": "user-123", "type": ACCESS_TOKEN_TYPE},
            "some-other-secret",
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_decode_garbage(self):
        with pytest.raises(InvalidTokenError):
            decode_token("not-a-jwt")

    def test_refresh_token_rejected_as_access(self):
        token = create_refresh_token({"sub": "user-123"})

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_access_token_rejected_as_refresh(self):
        token = create_access_token({"sub": "user-123"})

        with pytest.raises(InvalidTokenError):
            decode_token(token, expected_type=REFRESH_TOKEN_TYPE)

    def test_token_without_subject_rejected(self):
        token = create_access_token({"email": "a@x.com"})

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_invalid_token_is_authentication_error(self):
        assert issubclass(InvalidTokenError, AuthenticationError)
