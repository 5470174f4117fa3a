from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Callable, Optional

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.logging_config import set_user_id
from app.models.user import RolePolicy, get_role_policy
from app.schemas.auth import Principal
from app.services.auth_service import AuthService
from app.services.user_repository import UserRepository

security = HTTPBearer(auto_error=False)


def get_app_role_policy(request: Request) -> RolePolicy:
    """Role policy of the deployment profile this app was built for"""
    policy = getattr(request.app.state, "role_policy", None)
    return policy or get_role_policy(settings.DEPLOYMENT_PROFILE)


def get_auth_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    policy: RolePolicy = Depends(get_app_role_policy),
) -> AuthService:
    """Credential service bound to the request's database and profile"""
    return AuthService(
        users=UserRepository(db),
        policy=policy,
        admin_code=settings.ADMIN_REGISTRATION_CODE,
    )


async def verify_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Verify the bearer token and attach its claims to the request"""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing or invalid authorization header")

    principal = AuthService.verify_token(credentials.credentials)

    request.state.principal = principal
    set_user_id(principal.id)
    return principal


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory enforcing a role allow-list.

    Must run after verify_token, which attaches the principal:

        @router.post("", dependencies=[Depends(verify_token), Depends(require_roles("teacher"))])
    """
    allowed = {getattr(role, "value", role) for role in roles}

    async def check_roles(request: Request) -> Principal:
        principal = getattr(request.state, "principal", None)
        if principal is None:
            raise AuthenticationError("Not authenticated")
        if principal.role not in allowed:
            raise AuthorizationError("Insufficient permissions")
        return principal

    return check_roles


async def get_current_principal(
    principal: Principal = Depends(verify_token),
) -> Principal:
    """Authenticated principal for handlers that only need identity"""
    return principal
