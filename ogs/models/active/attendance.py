"""Daily facility attendance, one row per student and day."""

import datetime as dt
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ogs.models.base.base_model import TimestampModel
from ogs.models.base.enums import AttendanceStatus
from ogs.models.users.people import Staff

__all__ = ["Attendance"]


class Attendance(TimestampModel):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    check_in_time: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    checked_in_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False
    )
    device_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    check_out_time: Mapped[Optional[dt.datetime]] = mapped_column(DateTime, nullable=True)
    checked_out_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=True
    )

    checked_in_staff: Mapped[Staff] = relationship(Staff, foreign_keys=[checked_in_by], lazy="joined")
    checked_out_staff: Mapped[Optional[Staff]] = relationship(
        Staff, foreign_keys=[checked_out_by], lazy="joined"
    )

    def is_checked_in(self) -> bool:
        return self.check_out_time is None

    @property
    def status(self) -> AttendanceStatus:
        if self.is_checked_in():
            return AttendanceStatus.CHECKED_IN
        return AttendanceStatus.CHECKED_OUT
