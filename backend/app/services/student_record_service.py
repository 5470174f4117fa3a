"""
Student record service for the grading deployment profile.

Teachers manage every record. Students only ever see records filed under
their own full name.
"""
import re
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.exceptions import NotFoundError
from app.core.logging_config import logger
from app.models.student_record import (
    STUDENT_RECORDS_COLLECTION,
    Grade,
    new_student_record_document,
    serialize_student_record,
)
from app.models.user import USERS_COLLECTION, UserRole, touch
from app.schemas.auth import Principal
from app.schemas.student_record import StudentRecordCreate, StudentRecordUpdate
from app.utils.pagination import PaginationParams, create_paginated_response, paginate
from app.utils.validators import validate_student_record_fields


def _object_id(record_id: str) -> ObjectId:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        raise NotFoundError("Student record")


def full_name_query(first_name: str, last_name: str) -> Optional[Dict[str, Any]]:
    """Case-insensitive exact match on student_name, or None without a name"""
    full_name = f"{first_name or ''} {last_name or ''}".strip()
    if not full_name:
        return None
    return {"student_name": {"$regex": f"^{re.escape(full_name)}$", "$options": "i"}}


class StudentRecordService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[STUDENT_RECORDS_COLLECTION]
        self.users = db[USERS_COLLECTION]

    async def create(self, principal: Principal, data: StudentRecordCreate) -> Dict[str, Any]:
        validate_student_record_fields(data.student_name, data.student_id_number)

        doc = new_student_record_document(
            teacher_id=principal.id,
            student_name=data.student_name.strip(),
            student_id_number=data.student_id_number.strip(),
            grade=Grade(data.grade or Grade.PENDING.value),
        )
        await self.collection.insert_one(doc)

        logger.info(f"[Students] Student record created: {doc['_id']}")
        return serialize_student_record(doc)

    async def _student_query(self, principal: Principal) -> Optional[Dict[str, Any]]:
        # Names are not carried in the token, so read them from the profile
        user = await self.users.find_one(
            {"_id": ObjectId(principal.id)},
            projection={"first_name": 1, "last_name": 1},
        )
        if not user:
            return None
        return full_name_query(user.get("first_name", ""), user.get("last_name", ""))

    async def list_records(self, principal: Principal, params: PaginationParams) -> Dict[str, Any]:
        """All records for teachers; own-name matches for students"""
        query: Dict[str, Any] = {}
        if principal.role != UserRole.TEACHER.value:
            query = await self._student_query(principal)
            if query is None:
                return create_paginated_response([], 0, params.page, params.limit)

        return await paginate(self.collection, query, params, serializer=serialize_student_record)

    async def update(
        self, principal: Principal, record_id: str, data: StudentRecordUpdate
    ) -> Dict[str, Any]:
        oid = _object_id(record_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        validate_student_record_fields(
            changes.get("student_name"), changes.get("student_id_number"), required=False
        )
        for field in ("student_name", "student_id_number"):
            if field in changes:
                changes[field] = changes[field].strip()

        if changes:
            record = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": touch(changes)},
                return_document=ReturnDocument.AFTER,
            )
        else:
            record = await self.collection.find_one({"_id": oid})

        if not record:
            raise NotFoundError("Student record")

        logger.info(f"[Students] Student record updated: {record_id} by {principal.id}")
        return serialize_student_record(record)

    async def delete(self, principal: Principal, record_id: str) -> None:
        result = await self.collection.delete_one({"_id": _object_id(record_id)})
        if result.deleted_count == 0:
            raise NotFoundError("Student record")
        logger.info(f"[Students] Student record deleted: {record_id} by {principal.id}")
