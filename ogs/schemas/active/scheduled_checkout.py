"""Schemas for scheduled checkouts and processor runs."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from ogs.core.utils import DateTimeUtils
from ogs.models.base.enums import ScheduledCheckoutStatus
from ogs.schemas.common.base import BaseSchema

__all__ = [
    "ScheduledCheckoutCreate",
    "ScheduledCheckoutResponse",
    "ProcessingResponse",
]


class ScheduledCheckoutCreate(BaseSchema):
    student_id: int = Field(..., gt=0)
    scheduled_for: datetime = Field(..., description="When to check the student out")
    reason: Optional[str] = Field(default=None, max_length=255)

    @field_validator("scheduled_for")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        # Naive values are taken as UTC
        return DateTimeUtils.to_naive_utc(v)


class ScheduledCheckoutResponse(BaseSchema):
    id: int
    student_id: int
    scheduled_by: int
    scheduled_for: datetime
    reason: Optional[str] = None
    status: ScheduledCheckoutStatus
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None
    executed_at: Optional[datetime] = None
    error_message: Optional[str] = None


class ProcessingResponse(BaseSchema):
    success: bool
    message: str
    checkouts_attempted: int
    checkouts_executed: int
    checkouts_failed: int
    checkouts_skipped: int = 0
    errors: List[Dict[str, Any]] = Field(default_factory=list)
