from typing import Any, Dict, Optional
import enum

from bson import ObjectId

from app.models.user import utcnow


TASKS_COLLECTION = "tasks"


class TaskStatus(str, enum.Enum):
    """Task lifecycle"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def new_task_document(
    user_id: str,
    title: str,
    description: Optional[str] = None,
    priority: TaskPriority = TaskPriority.MEDIUM,
) -> Dict[str, Any]:
    now = utcnow()
    return {
        "_id": ObjectId(),
        "user_id": ObjectId(user_id),
        "title": title,
        "description": description,
        "status": TaskStatus.PENDING.value,
        "priority": priority.value,
        "due_date": None,
        "completed_at": None,
        "created_at": now,
        "updated_at": now,
    }


def serialize_task(doc: Dict[str, Any]) -> Dict[str, Any]:
    task = {k: v for k, v in doc.items() if k not in ("_id", "user_id")}
    task["id"] = str(doc["_id"])
    task["user_id"] = str(doc["user_id"])
    return task
