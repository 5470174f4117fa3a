from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from app.core.database import get_db
from app.modules.auth.dependencies import get_current_principal
from app.schemas.auth import Principal
from app.schemas.task import TaskCreate, TaskEnvelope, TaskListResponse, TaskUpdate
from app.services.task_service import TaskService
from app.utils.pagination import MAX_PAGE_SIZE, PaginationParams


router = APIRouter()


def get_task_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
):
    """Create a task owned by the current principal"""
    task = await service.create(principal, task_data)
    return {"success": True, "data": task, "message": "Task created successfully"}


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[str] = Query(None, pattern="^(pending|in_progress|completed|archived)$"),
    priority: Optional[str] = Query(None, pattern="^(low|medium|high)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
):
    """List the current principal's tasks, newest first"""
    result = await service.list_tasks(
        principal,
        PaginationParams.clamp(page, limit),
        status=status,
        priority=priority,
    )
    return {"success": True, **result}


@router.put("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
):
    """Update a task (owner or admin)"""
    task = await service.update(principal, task_id, task_data)
    return {"success": True, "data": task}


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    principal: Principal = Depends(get_current_principal),
    service: TaskService = Depends(get_task_service),
):
    """Delete a task (owner or admin)"""
    await service.delete(principal, task_id)
    return {"success": True, "message": "Task deleted"}
