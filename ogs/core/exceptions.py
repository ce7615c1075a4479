"""
Custom Exceptions for the OGS Attendance Application

Every exception carries an error code and the HTTP status it maps to, so
the API layer can render them without knowing where they were raised.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    NOT_STAFF = "NOT_STAFF"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Workflow errors
    CONFLICT = "CONFLICT"
    GROUP_ENDED = "GROUP_ENDED"
    STUDENT_ALREADY_CHECKED_IN = "STUDENT_ALREADY_CHECKED_IN"
    STUDENT_NOT_CHECKED_IN = "STUDENT_NOT_CHECKED_IN"
    ATTENDANCE_NOT_FOUND = "ATTENDANCE_NOT_FOUND"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the error envelope returned by the API"""
        return {
            "status": "error",
            "message": self.message,
            "error": {
                "code": self.error_code.value,
                "details": self.details,
            },
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when request data is invalid"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 400
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": str(resource_id) if resource_id is not None else None,
        }
        super().__init__(message, error_code, details, 404)


class ConflictError(BaseAppException):
    """Exception raised when the request conflicts with current state"""

    def __init__(
        self,
        message: str = "Request conflicts with current state",
        error_code: ErrorCode = ErrorCode.CONFLICT,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 409)


# ========================================
# Authentication & Authorization Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: ErrorCode = ErrorCode.AUTHENTICATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 401)


class TokenExpiredError(AuthenticationError):
    """Exception raised when a token has expired"""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, ErrorCode.TOKEN_EXPIRED)


class InvalidTokenError(AuthenticationError):
    """Exception raised when a token cannot be decoded or lacks claims"""

    def __init__(self, message: str = "Invalid token", reason: Optional[str] = None):
        details = {"reason": reason} if reason else {}
        super().__init__(message, ErrorCode.TOKEN_INVALID, details)


class AuthorizationError(BaseAppException):
    """Exception raised when authorization fails"""

    def __init__(
        self,
        message: str = "Access denied",
        required_permission: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.AUTHORIZATION_FAILED
    ):
        details = {"required_permission": required_permission} if required_permission else {}
        super().__init__(message, error_code, details, 403)


# ========================================
# Database / Repository Exceptions
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised when database operations fail"""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500
    ):
        details = {
            "operation": operation,
            "table": table
        }
        super().__init__(message, error_code, details, status_code)


class RepositoryError(DatabaseError):
    """Exception raised by repositories when a query or write fails"""

    def __init__(self, message: str = "Repository operation failed", table: Optional[str] = None):
        super().__init__(message, table=table)


class EntityAlreadyExistsError(DatabaseError):
    """Exception raised when a write violates a uniqueness constraint"""

    def __init__(self, message: str = "Entity already exists", table: Optional[str] = None):
        super().__init__(
            message,
            table=table,
            error_code=ErrorCode.DUPLICATE_ENTRY,
            status_code=409,
        )


# ========================================
# Attendance Workflow Exceptions
# ========================================

class AttendanceNotFoundError(ResourceNotFoundError):
    """No attendance record exists for the student today"""

    def __init__(self, student_id: Optional[int] = None):
        super().__init__(
            resource_type="Attendance",
            resource_id=student_id,
            message="No attendance record found for today",
            error_code=ErrorCode.ATTENDANCE_NOT_FOUND,
        )


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "ResourceNotFoundError",
    "ConflictError",
    "AuthenticationError",
    "TokenExpiredError",
    "InvalidTokenError",
    "AuthorizationError",
    "DatabaseError",
    "RepositoryError",
    "EntityAlreadyExistsError",
    "AttendanceNotFoundError",
]
