from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional
import enum
import random
import re

from bson import ObjectId


USERS_COLLECTION = "users"


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    TEACHER = "teacher"
    USER = "user"
    ADMIN = "admin"


class DeploymentProfile(str, enum.Enum):
    """Which API surface this deployment serves"""
    TASKS = "tasks"
    GRADING = "grading"


@dataclass(frozen=True)
class RolePolicy:
    """Closed role set of a deployment profile"""
    roles: FrozenSet[UserRole]
    default_role: UserRole
    elevated_roles: FrozenSet[UserRole]
    # Elevated accounts must present the admin code again at login
    admin_code_on_login: bool = False

    def resolve(self, requested: Optional[str]) -> UserRole:
        """Map a requested role onto the profile, falling back to the default"""
        try:
            role = UserRole(requested) if requested else self.default_role
        except ValueError:
            return self.default_role
        return role if role in self.roles else self.default_role

    def is_elevated(self, role: UserRole) -> bool:
        return role in self.elevated_roles


ROLE_POLICIES: Dict[DeploymentProfile, RolePolicy] = {
    DeploymentProfile.TASKS: RolePolicy(
        roles=frozenset({UserRole.USER, UserRole.ADMIN}),
        default_role=UserRole.USER,
        elevated_roles=frozenset({UserRole.ADMIN}),
    ),
    DeploymentProfile.GRADING: RolePolicy(
        roles=frozenset({UserRole.STUDENT, UserRole.TEACHER}),
        default_role=UserRole.STUDENT,
        elevated_roles=frozenset({UserRole.TEACHER}),
        admin_code_on_login=True,
    ),
}


def get_role_policy(profile: str) -> RolePolicy:
    """Role policy for a profile name. Raises ValueError on unknown profiles."""
    return ROLE_POLICIES[DeploymentProfile(profile)]


def utcnow() -> datetime:
    # BSON stores millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def generate_username(first_name: str = "", last_name: str = "") -> str:
    """Build a handle from the names plus a random suffix"""
    base = re.sub(r"\s", "", f"{first_name}{last_name}".lower())
    if base:
        return f"{base}{random.randint(0, 9999)}"
    return f"user{random.randint(0, 999999)}"


def new_user_document(
    email: str,
    username: str,
    password_hash: str,
    role: UserRole,
    first_name: str = "",
    last_name: str = "",
) -> Dict[str, Any]:
    """Build a fresh principal document. Email and username are lower-cased."""
    now = utcnow()
    return {
        "_id": ObjectId(),
        "email": email.lower(),
        "username": username.lower(),
        "password_hash": password_hash,
        "first_name": first_name,
        "last_name": last_name,
        "role": role.value,
        "is_active": True,
        "last_login": None,
        "created_at": now,
        "updated_at": now,
    }


def touch(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Return an update payload that always stamps updated_at"""
    return {**changes, "updated_at": utcnow()}


def sanitize_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the password digest and expose the id as a string"""
    user = {k: v for k, v in doc.items() if k not in ("password_hash", "_id")}
    user["id"] = str(doc["_id"])
    return user
