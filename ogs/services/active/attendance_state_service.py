"""
Attendance state reader.

Answers "where is this student today?" from the daily attendance row and the
student's open visit. The two are read independently: a student can be
checked in for the day while not being in any room.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ogs.core.exceptions import AttendanceNotFoundError, ResourceNotFoundError
from ogs.core.logging import get_logger
from ogs.core.utils import local_today
from ogs.models.active import Attendance, Visit
from ogs.models.base.enums import AttendanceStatus
from ogs.repositories.active import AttendanceRepository, VisitRepository
from ogs.repositories.users import StudentRepository

logger = get_logger(__name__)


@dataclass
class AttendanceSnapshot:
    """Point-in-time view of a student's daily attendance."""

    student_id: int
    status: AttendanceStatus
    date: date
    attendance_id: Optional[int] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    checked_in_by: Optional[str] = None
    checked_out_by: Optional[str] = None

    @classmethod
    def from_record(cls, student_id: int, day: date, record: Optional[Attendance]) -> "AttendanceSnapshot":
        if record is None:
            return cls(student_id=student_id, status=AttendanceStatus.NOT_CHECKED_IN, date=day)

        return cls(
            student_id=student_id,
            status=record.status,
            date=record.date,
            attendance_id=record.id,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            checked_in_by=record.checked_in_staff.display_name if record.checked_in_staff else None,
            checked_out_by=record.checked_out_staff.display_name if record.checked_out_staff else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class AttendanceStateService:
    """Read-only queries over attendance and visits."""

    def __init__(self, db: Session):
        self.db = db
        self.attendance = AttendanceRepository(db)
        self.visits = VisitRepository(db)
        self.students = StudentRepository(db)

    def get_attendance_record(self, student_id: int, day: Optional[date] = None) -> Attendance:
        """
        Today's attendance row for the student.

        Raises:
            AttendanceNotFoundError: No row exists for the day
            RepositoryError: The lookup itself failed
        """
        record = self.attendance.find_for_student_on(student_id, day or local_today())
        if record is None:
            raise AttendanceNotFoundError(student_id)
        return record

    def get_status(self, student_id: int, day: Optional[date] = None) -> AttendanceSnapshot:
        """Derived status; a missing row reads as ``not_checked_in``."""
        day = day or local_today()
        try:
            record = self.get_attendance_record(student_id, day)
        except AttendanceNotFoundError:
            record = None

        snapshot = AttendanceSnapshot.from_record(student_id, day, record)
        logger.debug("Attendance status read", student_id=student_id, status=snapshot.status.value)
        return snapshot

    def get_student_status(self, student_id: int) -> AttendanceSnapshot:
        """
        Status of a known student.

        Raises:
            ResourceNotFoundError: No such student
        """
        if self.students.find_by_id(student_id) is None:
            raise ResourceNotFoundError("Student", student_id)
        return self.get_status(student_id)

    def get_current_visit(self, student_id: int) -> Optional[Visit]:
        return self.visits.find_active_by_student(student_id)
