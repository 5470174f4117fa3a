"""
Custom Exceptions for Classdesk
===============================

Every failure raised by the service layer is one of these. The exception
handlers in app.main map them to their carried status code.

Usage:
    from app.core.exceptions import NotFoundError, AuthorizationError

    if not task:
        raise NotFoundError("Task")

    if task["user_id"] != principal.id:
        raise AuthorizationError("Cannot update other users' tasks")
"""

from datetime import datetime, timezone
from typing import Optional, Any, Dict


class AppError(Exception):
    """Base exception for all Classdesk errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "timestamp": self.timestamp,
        }
        if self.details:
            data["details"] = self.details
        return data


# ============================================
# Validation Errors (400)
# ============================================

class ValidationError(AppError):
    """Input validation failed. details maps field -> message"""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, str]] = None):
        super().__init__(message, status_code=400, code="VALIDATION_ERROR", details=details)


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(AppError):
    """User authentication failed"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401, code="AUTHENTICATION_ERROR")


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid, expired or of the wrong type"""

    def __init__(self):
        super().__init__("Invalid or expired token")


class AuthorizationError(AppError):
    """User not authorized for this action"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403, code="AUTHORIZATION_ERROR")


# ============================================
# Resource Errors
# ============================================

class NotFoundError(AppError):
    """Resource not found"""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", status_code=404, code="NOT_FOUND")


class DuplicateError(AppError):
    """Resource already exists"""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} already exists", status_code=409, code="DUPLICATE_ERROR")


# ============================================
# Storage Errors
# ============================================

class DatabaseUnavailableError(AppError):
    """The MongoDB connection is not available"""

    def __init__(self, message: str = "Database connection failed. Please try again later."):
        super().__init__(message, status_code=503, code="DB_CONNECTION_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: AppError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
