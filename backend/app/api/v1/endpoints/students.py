from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.database import get_db
from app.models.user import UserRole
from app.modules.auth.dependencies import get_current_principal, require_roles
from app.schemas.auth import Principal
from app.schemas.student_record import (
    StudentRecordCreate,
    StudentRecordEnvelope,
    StudentRecordListResponse,
    StudentRecordUpdate,
)
from app.services.student_record_service import StudentRecordService
from app.utils.pagination import MAX_PAGE_SIZE, PaginationParams


router = APIRouter()

teacher_only = [Depends(get_current_principal), Depends(require_roles(UserRole.TEACHER))]


def get_student_record_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> StudentRecordService:
    return StudentRecordService(db)


@router.post(
    "",
    response_model=StudentRecordEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=teacher_only,
)
async def create_record(
    record_data: StudentRecordCreate,
    principal: Principal = Depends(get_current_principal),
    service: StudentRecordService = Depends(get_student_record_service),
):
    """Add a student record (teachers only)"""
    record = await service.create(principal, record_data)
    return {"success": True, "data": record, "message": "Student record added successfully"}


@router.get("", response_model=StudentRecordListResponse)
async def list_records(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    principal: Principal = Depends(get_current_principal),
    service: StudentRecordService = Depends(get_student_record_service),
):
    """Teachers see every record, students only their own"""
    result = await service.list_records(principal, PaginationParams.clamp(page, limit))
    return {"success": True, **result}


@router.put("/{record_id}", response_model=StudentRecordEnvelope, dependencies=teacher_only)
async def update_record(
    record_id: str,
    record_data: StudentRecordUpdate,
    principal: Principal = Depends(get_current_principal),
    service: StudentRecordService = Depends(get_student_record_service),
):
    """Update a student record (teachers only)"""
    record = await service.update(principal, record_id, record_data)
    return {"success": True, "data": record}


@router.delete("/{record_id}", dependencies=teacher_only)
async def delete_record(
    record_id: str,
    principal: Principal = Depends(get_current_principal),
    service: StudentRecordService = Depends(get_student_record_service),
):
    """Delete a student record (teachers only)"""
    await service.delete(principal, record_id)
    return {"success": True, "message": "Student record deleted"}
