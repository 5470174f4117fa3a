"""
Unit Tests for request and response schemas
"""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from app.schemas.auth import AuthPayload, Principal, UserLogin, UserRegister, UserResponse
from app.schemas.student_record import StudentRecordCreate, StudentRecordUpdate
from app.schemas.task import TaskCreate, TaskUpdate


class TestUserRegister:
    def test_accepts_camel_case_aliases(self):
        data = UserRegister(
            email="a@x.com", password="Abcdef1!", firstName="Ada", lastName="Byron", adminCode="code"
        )

        assert data.first_name == "Ada"
        assert data.last_name == "Byron"
        assert data.admin_code == "code"

    def test_accepts_field_names(self):
        data = UserRegister(email="a@x.com", password="Abcdef1!", first_name="Ada")

        assert data.first_name == "Ada"
        assert data.role is None

    def test_strength_rules_left_to_service(self):
        # Weak values parse; the service reports every failing field together
        data = UserRegister(email="bad", password="x")

        assert data.password == "x"

    def test_requires_email_and_password(self):
        with pytest.raises(ValidationError):
            UserRegister()


class TestUserLogin:
    def test_empty_password_rejected(self):
        with pytest.raises(ValidationError):
            UserLogin(email="a@x.com", password="")

    def test_optional_role_and_code(self):
        data = UserLogin(email="a@x.com", password="x", role="teacher", adminCode="c")

        assert data.role == "teacher"
        assert data.admin_code == "c"


class TestResponses:
    def test_auth_payload_drops_unknown_fields(self):
        now = datetime.now(timezone.utc)
        payload = AuthPayload(
            user=UserResponse(
                id="abc",
                email="a@x.com",
                username="a",
                role="student",
                is_active=True,
                created_at=now,
                updated_at=now,
            ),
            access_token="a",
            refresh_token="r",
        )

        assert payload.token_type == "bearer"
        assert "password_hash" not in payload.user.model_dump()

    def test_principal(self):
        assert Principal(id="1", email="a@x.com", role="user").role == "user"


class TestResourceSchemas:
    @pytest.mark.parametrize("status", ["pending", "in_progress", "completed", "archived"])
    def test_task_statuses(self, status):
        assert TaskUpdate(status=status).status == status

    def test_unknown_task_status(self):
        with pytest.raises(ValidationError):
            TaskUpdate(status="done")

    def test_task_title_length(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="x" * 256)

    @pytest.mark.parametrize("grade", ["A", "B", "C", "D", "F", "Pending"])
    def test_grades(self, grade):
        assert StudentRecordCreate(student_name="Ada", student_id_number="S-1", grade=grade).grade == grade

    @pytest.mark.parametrize("grade", ["E", "a", "pending", "A+"])
    def test_invalid_grades(self, grade):
        with pytest.raises(ValidationError):
            StudentRecordUpdate(grade=grade)
