"""
Standard API response wrappers.
"""

from typing import Generic, TypeVar, Union

from pydantic import Field

from ogs.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = ["SuccessResponse", "ErrorInfo", "ErrorResponse"]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success envelope."""

    status: str = Field(default="success")
    message: str = Field(..., description="Response message")
    data: Union[T, None] = Field(default=None, description="Response data")

    @classmethod
    def create(cls, message: str, data: Union[T, None] = None):
        return cls(status="success", message=message, data=data)


class ErrorInfo(BaseSchema):
    code: str
    details: dict = Field(default_factory=dict)


class ErrorResponse(BaseSchema):
    """Standard error envelope."""

    status: str = Field(default="error")
    message: str
    error: ErrorInfo
