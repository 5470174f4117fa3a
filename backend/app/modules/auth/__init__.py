# Authentication module

from app.modules.auth.dependencies import (
    security,
    get_auth_service,
    get_app_role_policy,
    verify_token,
    require_roles,
    get_current_principal,
)

__all__ = [
    "security",
    "get_auth_service",
    "get_app_role_policy",
    "verify_token",
    "require_roles",
    "get_current_principal",
]
