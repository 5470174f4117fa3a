from app.services.user_repository import UserRepository
from app.services.auth_service import AuthService
from app.services.task_service import TaskService
from app.services.student_record_service import StudentRecordService

__all__ = [
    "UserRepository",
    "AuthService",
    "TaskService",
    "StudentRecordService",
]
