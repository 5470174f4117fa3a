from typing import Any, Dict
import enum

from bson import ObjectId

from app.models.user import utcnow


STUDENT_RECORDS_COLLECTION = "student_records"


class Grade(str, enum.Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"
    PENDING = "Pending"


def new_student_record_document(
    teacher_id: str,
    student_name: str,
    student_id_number: str,
    grade: Grade = Grade.PENDING,
) -> Dict[str, Any]:
    now = utcnow()
    return {
        "_id": ObjectId(),
        "teacher_id": ObjectId(teacher_id),
        "student_name": student_name,
        "student_id_number": student_id_number,
        "grade": grade.value,
        "created_at": now,
        "updated_at": now,
    }


def serialize_student_record(doc: Dict[str, Any]) -> Dict[str, Any]:
    record = {k: v for k, v in doc.items() if k not in ("_id", "teacher_id")}
    record["id"] = str(doc["_id"])
    record["teacher_id"] = str(doc["teacher_id"])
    return record
