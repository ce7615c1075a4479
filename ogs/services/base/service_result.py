"""
Service result patterns for standardized response handling.
"""

from typing import TypeVar, Generic, Optional, Any, Dict
from dataclasses import dataclass
from enum import Enum
from datetime import datetime, timezone

from ogs.core.exceptions import BaseAppException, DatabaseError


class ErrorCode(str, Enum):
    """Standard error codes for service operations."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"

    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# HTTP status each service error code surfaces as
HTTP_STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.INSUFFICIENT_PERMISSIONS: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ALREADY_EXISTS: 409,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

_CODE_BY_HTTP_STATUS = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.INSUFFICIENT_PERMISSIONS,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
}


@dataclass
class ServiceError:
    """Represents a service operation error with context."""

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE.get(self.code, 500)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.reason or self.code.value,
            "message": self.message,
            "details": self.details or {},
        }


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Standardized service operation result with success/failure pattern.

    Attributes:
        is_success: Operation success indicator
        data: Result data (if successful)
        error: Error information (if failed)
        message: Human-readable status message
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message)

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def from_app_exception(cls, exception: BaseAppException) -> "ServiceResult[TData]":
        """Translate a domain exception into a failed result, keeping its error code."""
        code = _CODE_BY_HTTP_STATUS.get(exception.status_code, ErrorCode.INTERNAL_ERROR)
        if code is ErrorCode.INTERNAL_ERROR and isinstance(exception, DatabaseError):
            code = ErrorCode.DATABASE_ERROR
        return cls.failure(
            ServiceError(
                code=code,
                message=exception.message,
                details=exception.details,
                reason=exception.error_code.value,
                severity=ErrorSeverity.ERROR if exception.status_code >= 500 else ErrorSeverity.WARNING,
            )
        )

    @classmethod
    def not_found(cls, resource_type: str, resource_id: Optional[Any] = None) -> "ServiceResult[TData]":
        message = f"{resource_type} not found"
        if resource_id is not None:
            message += f" (ID: {resource_id})"
        return cls.failure(
            ServiceError(
                code=ErrorCode.NOT_FOUND,
                message=message,
                severity=ErrorSeverity.WARNING,
                details={"resource_type": resource_type, "resource_id": str(resource_id)},
            )
        )

    def __bool__(self) -> bool:
        return self.is_success

    def __repr__(self) -> str:
        status = "Success" if self.is_success else "Failure"
        if self.message:
            return f"ServiceResult({status}: {self.message})"
        return f"ServiceResult({status})"


__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
    "HTTP_STATUS_BY_CODE",
]
