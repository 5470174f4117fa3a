"""
Credential service: registration, login, token issuance and verification.
"""
import hmac
from typing import Any, Dict, Optional

from bson import ObjectId

from app.core.exceptions import AuthenticationError, DuplicateError, InvalidTokenError, NotFoundError
from app.core.logging_config import logger
from app.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password_async,
    verify_password_async,
)
from app.models.user import (
    RolePolicy,
    UserRole,
    generate_username,
    new_user_document,
    sanitize_user,
    utcnow,
)
from app.schemas.auth import Principal, UserRegister
from app.services.user_repository import UserRepository
from app.utils.validators import validate_credentials

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_ADMIN_CODE = "Invalid admin code for elevated role"
ACCOUNT_INACTIVE = "Account is inactive. Please contact admin."
ROLE_MISMATCH = "Role mismatch. Please select your correct role."


class AuthService:
    """Registers and authenticates principals for one deployment profile"""

    def __init__(self, users: UserRepository, policy: RolePolicy, admin_code: str = ""):
        self.users = users
        self.policy = policy
        self.admin_code = admin_code

    def _admin_code_valid(self, supplied: Optional[str]) -> bool:
        if not self.admin_code or not supplied:
            return False
        return hmac.compare_digest(supplied.encode("utf-8"), self.admin_code.encode("utf-8"))

    def issue_tokens(self, user: Dict[str, Any]) -> Dict[str, str]:
        """Access token with sub/email/role and a renewal token with sub only"""
        user_id = str(user["_id"])
        access_token = create_access_token(
            {"sub": user_id, "email": user["email"], "role": user["role"]}
        )
        refresh_token = create_refresh_token({"sub": user_id})
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
        }

    async def register(self, data: UserRegister) -> Dict[str, Any]:
        """
        Create a principal and sign it in.

        Raises:
            ValidationError: email or password rules failed (all fields listed)
            AuthenticationError: elevated role requested without a valid admin code
            DuplicateError: email or username already taken
        """
        role = self.policy.resolve(data.role)

        validate_credentials(data.email, data.password)

        if self.policy.is_elevated(role) and not self._admin_code_valid(data.admin_code):
            logger.log_auth_event(
                event="register", success=False, user_email=data.email, reason="invalid admin code"
            )
            raise AuthenticationError(INVALID_ADMIN_CODE)

        username = (data.username or "").strip() or generate_username(data.first_name, data.last_name)

        if await self.users.exists(data.email, username):
            logger.log_auth_event(
                event="register", success=False, user_email=data.email, reason="already registered"
            )
            raise DuplicateError("User")

        password_hash = await hash_password_async(data.password)
        user = new_user_document(
            email=data.email,
            username=username,
            password_hash=password_hash,
            role=role,
            first_name=data.first_name,
            last_name=data.last_name,
        )

        # Tokens are signed before the insert so a signing failure leaves
        # nothing persisted.
        tokens = self.issue_tokens(user)
        await self.users.insert(user)

        logger.log_auth_event(
            event="register", success=True, user_email=user["email"], user_role=role.value
        )
        return {"user": sanitize_user(user), **tokens}

    async def login(
        self,
        email: str,
        password: str,
        role: Optional[str] = None,
        admin_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Authenticate by email and password.

        Unknown email and wrong password fail with the same message. Inactive
        account and role mismatch are reported only once the password matched.
        """
        user = await self.users.find_by_email(email)

        password_ok = await verify_password_async(
            password, user["password_hash"] if user else None
        )
        if not user or not password_ok:
            logger.log_auth_event(event="login", success=False, user_email=email, reason="bad credentials")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.get("is_active", True):
            logger.log_auth_event(event="login", success=False, user_email=email, reason="inactive")
            raise AuthenticationError(ACCOUNT_INACTIVE)

        if role and role != user["role"]:
            logger.log_auth_event(event="login", success=False, user_email=email, reason="role mismatch")
            raise AuthenticationError(ROLE_MISMATCH)

        if (
            self.policy.admin_code_on_login
            and self.policy.is_elevated(UserRole(user["role"]))
            and not self._admin_code_valid(admin_code)
        ):
            logger.log_auth_event(event="login", success=False, user_email=email, reason="invalid admin code")
            raise AuthenticationError()

        updated = await self.users.update(user["_id"], {"last_login": utcnow()}) or user
        tokens = self.issue_tokens(updated)

        logger.log_auth_event(event="login", success=True, user_email=updated["email"])
        return {"user": sanitize_user(updated), **tokens}

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange a renewal token for a fresh token pair"""
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)

        user = await self.users.find_by_id(payload["sub"])
        if not user or not user.get("is_active", True):
            raise InvalidTokenError()

        return {"user": sanitize_user(user), **self.issue_tokens(user)}

    @staticmethod
    def verify_token(token: str) -> Principal:
        """Decode an access token into its claims"""
        payload = decode_token(token)
        # Subjects are user ObjectIds
        if not ObjectId.is_valid(payload["sub"]):
            raise InvalidTokenError()
        return Principal(id=payload["sub"], email=payload.get("email", ""), role=payload.get("role", ""))

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        user = await self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError("User")
        return sanitize_user(user)
