"""
Input validators shared by the service layer.

Each validator collects every failing field before raising, so a client sees
the full list of problems in one response.
"""
import re
from typing import Dict, List, Optional

from app.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "!@#$%^&*"


def email_errors(email: Optional[str]) -> List[str]:
    if not email or not EMAIL_PATTERN.fullmatch(email):
        return ["Invalid email format"]
    return []


def password_errors(password: Optional[str]) -> List[str]:
    """Every strength rule the password fails"""
    password = password or ""
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain an uppercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain a number")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        errors.append(f"Password must contain a special character ({PASSWORD_SYMBOLS})")
    return errors


def validate_credentials(email: Optional[str], password: Optional[str]) -> None:
    """Raise ValidationError naming every failing field"""
    details: Dict[str, str] = {}

    problems = email_errors(email)
    if problems:
        details["email"] = "; ".join(problems)

    problems = password_errors(password)
    if problems:
        details["password"] = "; ".join(problems)

    if details:
        raise ValidationError("Validation failed", details)


def validate_task_fields(title: Optional[str], priority: Optional[str], required: bool = True) -> None:
    details: Dict[str, str] = {}

    if title is not None or required:
        if not title or not title.strip():
            details["title"] = "Title is required"
        elif len(title) > 255:
            details["title"] = "Title must be less than 255 characters"

    if priority is not None and priority not in ("low", "medium", "high"):
        details["priority"] = "Priority must be low, medium, or high"

    if details:
        raise ValidationError("Validation failed", details)


def validate_student_record_fields(
    student_name: Optional[str],
    student_id_number: Optional[str],
    required: bool = True,
) -> None:
    details: Dict[str, str] = {}

    if student_name is not None or required:
        if not student_name or not student_name.strip():
            details["student_name"] = "Student name is required"
        elif len(student_name) > 255:
            details["student_name"] = "Student name must be less than 255 characters"

    if student_id_number is not None or required:
        if not student_id_number or not student_id_number.strip():
            details["student_id_number"] = "Student ID number is required"

    if details:
        raise ValidationError("Validation failed", details)
