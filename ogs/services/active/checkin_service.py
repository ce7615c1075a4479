"""
Student checkin: open a visit in an active group and mark the student as
present for the day.
"""

from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import (
    BaseAppException,
    ConflictError,
    EntityAlreadyExistsError,
    ErrorCode,
    ResourceNotFoundError,
)
from ogs.core.utils import local_today, now_utc
from ogs.models.active import ActiveGroup, Attendance, Visit
from ogs.models.base.enums import AttendanceStatus
from ogs.models.users import Staff, Student
from ogs.repositories.active import ActiveGroupRepository, AttendanceRepository, VisitRepository
from ogs.repositories.users import StudentRepository
from ogs.services.active.attendance_state_service import AttendanceStateService
from ogs.services.active.authorization import AccessAction, AuthorizationResolver
from ogs.services.base import BaseService, ServiceResult


class CheckinService(BaseService):
    """
    Responsibilities:
    - Validate the target group and the student's current state
    - Authorize the acting staff member
    - Create the visit, refresh the group, open today's attendance
    """

    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.students = StudentRepository(db_session)
        self.groups = ActiveGroupRepository(db_session)
        self.visits = VisitRepository(db_session)
        self.attendance = AttendanceRepository(db_session)
        self.state = AttendanceStateService(db_session)
        self.authorization = AuthorizationResolver(db_session)

    def checkin(
        self,
        account_id: int,
        student_id: int,
        active_group_id: int,
    ) -> ServiceResult[Dict[str, Any]]:
        """
        Check a student into an active group on behalf of the account's staff.

        Returns:
            ServiceResult with the new visit and (best-effort) attendance data
        """
        operation = "checkin"
        self._logger.info(
            f"{operation}: student_id={student_id}, active_group_id={active_group_id}",
            account_id=account_id,
        )

        try:
            staff = self.authorization.resolve_staff(account_id)
            student = self._get_student(student_id)
            group = self._get_group(active_group_id)

            if not group.is_active():
                raise ConflictError(
                    "Active group has ended",
                    error_code=ErrorCode.GROUP_ENDED,
                    details={"active_group_id": active_group_id},
                )

            self.authorization.ensure_authorized(staff, student, AccessAction.CHECKIN, target_group=group)

            current_visit = self.state.get_current_visit(student_id)
            if current_visit is not None:
                raise ConflictError(
                    "Student already has an active visit",
                    error_code=ErrorCode.STUDENT_ALREADY_CHECKED_IN,
                    details={"visit_id": current_visit.id, "active_group_id": current_visit.active_group_id},
                )

            if self.state.get_status(student_id).status is AttendanceStatus.CHECKED_IN:
                raise ConflictError(
                    "Student is already checked in",
                    error_code=ErrorCode.STUDENT_ALREADY_CHECKED_IN,
                )

            with self.transaction():
                visit = self._open_visit(student, group)
                self._mark_present(student, staff)

        except EntityAlreadyExistsError as e:
            return self._handle_exception(
                ConflictError(
                    "Student already has an active visit",
                    error_code=ErrorCode.STUDENT_ALREADY_CHECKED_IN,
                ),
                operation,
                student_id,
                {"constraint_table": e.details.get("table")},
            )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, student_id)

        response_data = {
            "student_id": student_id,
            "action": "checked_in",
            "visit_id": visit.id,
            "active_group_id": group.id,
            "room_id": group.room_id,
        }
        response_data.update(self._attendance_fields(student_id))

        self._logger.info(
            f"{operation} successful: student_id={student_id}",
            visit_id=visit.id,
            active_group_id=group.id,
            staff_id=staff.id,
        )
        return ServiceResult.success(response_data, message="Student checked in successfully")

    # -------------------------------------------------------------------------

    def _get_student(self, student_id: int) -> Student:
        student = self.students.find_by_id(student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id)
        return student

    def _get_group(self, active_group_id: int) -> ActiveGroup:
        group = self.groups.find_by_id(active_group_id)
        if group is None:
            raise ResourceNotFoundError("Active group", active_group_id)
        return group

    def _open_visit(self, student: Student, group: ActiveGroup) -> Visit:
        now = now_utc()
        visit = self.visits.create(
            Visit(student_id=student.id, active_group_id=group.id, entry_time=now)
        )
        self.groups.update(group, {"last_activity": now})
        return visit

    def _mark_present(self, student: Student, staff: Staff) -> Attendance:
        """Open today's attendance row, reusing it after an earlier checkout."""
        now = now_utc()
        today = local_today()
        record = self.attendance.find_for_student_on(student.id, today)

        if record is None:
            return self.attendance.create(
                Attendance(
                    student_id=student.id,
                    date=today,
                    check_in_time=now,
                    checked_in_by=staff.id,
                )
            )

        return self.attendance.update(
            record,
            {
                "check_in_time": now,
                "checked_in_by": staff.id,
                "check_out_time": None,
                "checked_out_by": None,
            },
        )

    def _attendance_fields(self, student_id: int) -> Dict[str, Any]:
        try:
            snapshot = self.state.get_status(student_id)
        except (BaseAppException, SQLAlchemyError) as e:
            self._logger.warning(
                "Attendance re-read after checkin failed",
                student_id=student_id,
                error=str(e),
            )
            return {}

        return {
            "attendance_status": snapshot.status.value,
            "check_in_time": snapshot.check_in_time,
            "checked_in_by": snapshot.checked_in_by,
        }
