# Re-export all models for convenient imports
from app.models.user import (
    UserRole,
    DeploymentProfile,
    RolePolicy,
    ROLE_POLICIES,
    USERS_COLLECTION,
    get_role_policy,
)
from app.models.task import TaskStatus, TaskPriority, TASKS_COLLECTION
from app.models.student_record import Grade, STUDENT_RECORDS_COLLECTION

__all__ = [
    # User
    "UserRole",
    "DeploymentProfile",
    "RolePolicy",
    "ROLE_POLICIES",
    "USERS_COLLECTION",
    "get_role_policy",
    # Task
    "TaskStatus",
    "TaskPriority",
    "TASKS_COLLECTION",
    # Student record
    "Grade",
    "STUDENT_RECORDS_COLLECTION",
]
