"""
Task service for the tasks deployment profile.

Tasks belong to the principal that created them; admins may modify any task.
"""
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.logging_config import logger
from app.models.task import TASKS_COLLECTION, TaskPriority, TaskStatus, new_task_document, serialize_task
from app.models.user import UserRole, touch, utcnow
from app.schemas.auth import Principal
from app.schemas.task import TaskCreate, TaskUpdate
from app.utils.pagination import PaginationParams, paginate
from app.utils.validators import validate_task_fields


def _object_id(task_id: str) -> ObjectId:
    # Malformed ids can never match a task
    try:
        return ObjectId(task_id)
    except (InvalidId, TypeError):
        raise NotFoundError("Task")


class TaskService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[TASKS_COLLECTION]

    async def create(self, principal: Principal, data: TaskCreate) -> Dict[str, Any]:
        validate_task_fields(data.title, data.priority)

        doc = new_task_document(
            user_id=principal.id,
            title=data.title.strip(),
            description=data.description,
            priority=TaskPriority(data.priority or TaskPriority.MEDIUM.value),
        )
        if data.due_date:
            doc["due_date"] = data.due_date

        await self.collection.insert_one(doc)
        logger.info(f"[Tasks] Created task {doc['_id']} for user {principal.id}")
        return serialize_task(doc)

    async def list_tasks(
        self,
        principal: Principal,
        params: PaginationParams,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Principal's own tasks, newest first"""
        query: Dict[str, Any] = {"user_id": ObjectId(principal.id)}
        if status:
            query["status"] = status
        if priority:
            query["priority"] = priority

        return await paginate(self.collection, query, params, serializer=serialize_task)

    async def _get_modifiable(self, principal: Principal, task_id: str, action: str) -> Dict[str, Any]:
        task = await self.collection.find_one({"_id": _object_id(task_id)})
        if not task:
            raise NotFoundError("Task")
        if str(task["user_id"]) != principal.id and principal.role != UserRole.ADMIN.value:
            raise AuthorizationError(f"Cannot {action} other users' tasks")
        return task

    async def update(self, principal: Principal, task_id: str, data: TaskUpdate) -> Dict[str, Any]:
        task = await self._get_modifiable(principal, task_id, "update")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        validate_task_fields(changes.get("title"), changes.get("priority"), required=False)

        if "title" in changes:
            changes["title"] = changes["title"].strip()
        if changes.get("status") == TaskStatus.COMPLETED.value and not task.get("completed_at"):
            changes["completed_at"] = utcnow()

        updated = await self.collection.find_one_and_update(
            {"_id": task["_id"]},
            {"$set": touch(changes)},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFoundError("Task")
        return serialize_task(updated)

    async def delete(self, principal: Principal, task_id: str) -> None:
        task = await self._get_modifiable(principal, task_id, "delete")
        await self.collection.delete_one({"_id": task["_id"]})
        logger.info(f"[Tasks] Deleted task {task_id} by user {principal.id}")
