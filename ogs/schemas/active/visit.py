"""
Request and response schemas for checkin, checkout and visits.
"""

import datetime as dt
from typing import Optional

from pydantic import Field, computed_field

from ogs.schemas.common.base import BaseSchema

__all__ = [
    "CheckinRequest",
    "CheckinData",
    "CheckoutData",
    "AttendanceStatusData",
    "VisitResponse",
]


class CheckinRequest(BaseSchema):
    active_group_id: int = Field(..., gt=0, description="Active group to check the student into")


class CheckinData(BaseSchema):
    student_id: int
    action: str = "checked_in"
    visit_id: int
    active_group_id: int
    room_id: int
    attendance_status: Optional[str] = None
    check_in_time: Optional[dt.datetime] = None
    checked_in_by: Optional[str] = None


class CheckoutData(BaseSchema):
    student_id: int
    action: str = "checked_out"
    attendance_id: int
    attendance_status: Optional[str] = None
    check_in_time: Optional[dt.datetime] = None
    check_out_time: Optional[dt.datetime] = None
    checked_in_by: Optional[str] = None
    checked_out_by: Optional[str] = None


class AttendanceStatusData(BaseSchema):
    student_id: int
    status: str
    date: dt.date
    attendance_id: Optional[int] = None
    check_in_time: Optional[dt.datetime] = None
    check_out_time: Optional[dt.datetime] = None
    checked_in_by: Optional[str] = None
    checked_out_by: Optional[str] = None


class VisitResponse(BaseSchema):
    id: int
    student_id: int
    active_group_id: int
    entry_time: dt.datetime
    exit_time: Optional[dt.datetime] = None

    @computed_field
    @property
    def is_active(self) -> bool:
        return self.exit_time is None
