from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.schemas.task import PaginationMeta


GRADE_PATTERN = "^(A|B|C|D|F|Pending)$"


class StudentRecordCreate(BaseModel):
    student_name: str = Field(..., max_length=255)
    student_id_number: str = Field(..., max_length=100)
    grade: Optional[str] = Field(None, pattern=GRADE_PATTERN)


class StudentRecordUpdate(BaseModel):
    student_name: Optional[str] = Field(None, max_length=255)
    student_id_number: Optional[str] = Field(None, max_length=100)
    grade: Optional[str] = Field(None, pattern=GRADE_PATTERN)


class StudentRecordResponse(BaseModel):
    id: str
    teacher_id: str
    student_name: str
    student_id_number: str
    grade: str
    created_at: datetime
    updated_at: datetime


class StudentRecordEnvelope(BaseModel):
    success: bool = True
    data: StudentRecordResponse
    message: Optional[str] = None


class StudentRecordListResponse(BaseModel):
    success: bool = True
    data: List[StudentRecordResponse]
    pagination: PaginationMeta
