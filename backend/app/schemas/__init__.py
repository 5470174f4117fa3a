# Pydantic schemas
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    Principal,
    UserResponse,
    AuthPayload,
    AuthResponse,
)
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskEnvelope,
    TaskListResponse,
    PaginationMeta,
)
from app.schemas.student_record import (
    StudentRecordCreate,
    StudentRecordUpdate,
    StudentRecordResponse,
    StudentRecordEnvelope,
    StudentRecordListResponse,
)
