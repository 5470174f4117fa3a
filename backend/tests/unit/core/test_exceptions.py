"""
Unit Tests for the error hierarchy
"""
import pytest
from datetime import datetime

from app.core.exceptions import (
    AppError,
    ValidationError,
    AuthenticationError,
    InvalidTokenError,
    AuthorizationError,
    NotFoundError,
    DuplicateError,
    DatabaseUnavailableError,
    error_response,
)


@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (ValidationError(), 400, "VALIDATION_ERROR"),
        (AuthenticationError(), 401, "AUTHENTICATION_ERROR"),
        (InvalidTokenError(), 401, "AUTHENTICATION_ERROR"),
        (AuthorizationError(), 403, "AUTHORIZATION_ERROR"),
        (NotFoundError("Task"), 404, "NOT_FOUND"),
        (DuplicateError("User"), 409, "DUPLICATE_ERROR"),
        (DatabaseUnavailableError(), 503, "DB_CONNECTION_ERROR"),
    ],
)
def test_error_kinds_map_to_status(error, status_code, code):
    assert error.status_code == status_code
    assert error.code == code
    assert isinstance(error, AppError)


def test_resource_messages():
    assert NotFoundError("Task").message == "Task not found"
    assert DuplicateError("User").message == "User already exists"


def test_to_dict_shape():
    error = ValidationError("Validation failed", {"email": "Invalid email format"})

    data = error.to_dict()

    assert data["name"] == "ValidationError"
    assert data["message"] == "Validation failed"
    assert data["code"] == "VALIDATION_ERROR"
    assert data["status_code"] == 400
    assert data["details"] == {"email": "Invalid email format"}
    # UTC ISO-8601
    assert datetime.fromisoformat(data["timestamp"]).utcoffset().total_seconds() == 0


def test_to_dict_omits_empty_details():
    assert "details" not in AuthenticationError().to_dict()


def test_error_response_envelope():
    body = error_response(NotFoundError("Student record"))

    assert body["success"] is False
    assert body["error"]["message"] == "Student record not found"
