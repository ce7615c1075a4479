"""
Student checkout.

Only the attendance update is essential. Closing the visit and cancelling a
pending scheduled checkout are secondary: their failures are logged and the
checkout still completes.
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import BaseAppException, ErrorCode, ResourceNotFoundError
from ogs.core.utils import now_utc
from ogs.models.active import Attendance, ScheduledCheckout
from ogs.models.base.enums import AttendanceStatus, ScheduledCheckoutStatus
from ogs.models.users import Staff, Student
from ogs.repositories.active import AttendanceRepository, ScheduledCheckoutRepository, VisitRepository
from ogs.repositories.users import StaffRepository, StudentRepository
from ogs.services.active.attendance_state_service import AttendanceStateService
from ogs.services.active.authorization import AccessAction, AuthorizationResolver
from ogs.services.base import BaseService, ServiceResult


class StudentNotCheckedInError(ResourceNotFoundError):
    """Checkout requested for a student who is not checked in today."""

    def __init__(self, student_id: int, status: AttendanceStatus):
        super().__init__(
            resource_type="Attendance",
            resource_id=student_id,
            message="Student is not currently checked in",
            error_code=ErrorCode.STUDENT_NOT_CHECKED_IN,
        )
        self.details["attendance_status"] = status.value


class CheckoutService(BaseService):
    """Ends a student's day: visit, attendance, scheduled checkout."""

    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.students = StudentRepository(db_session)
        self.staff = StaffRepository(db_session)
        self.visits = VisitRepository(db_session)
        self.attendance = AttendanceRepository(db_session)
        self.scheduled = ScheduledCheckoutRepository(db_session)
        self.state = AttendanceStateService(db_session)
        self.authorization = AuthorizationResolver(db_session)

    def checkout(self, account_id: int, student_id: int) -> ServiceResult[Dict[str, Any]]:
        """Check a student out on behalf of the account's staff member."""
        operation = "checkout"
        self._logger.info(f"{operation}: student_id={student_id}", account_id=account_id)

        try:
            staff = self.authorization.resolve_staff(account_id)
            student = self._get_student(student_id)
            record = self._require_checked_in(student_id)
            self.authorization.ensure_authorized(staff, student, AccessAction.CHECKOUT)

            response_data = self.execute_checkout(student, staff, record)
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, student_id)

        return ServiceResult.success(response_data, message="Student checked out successfully")

    def checkout_as_staff(self, student_id: int, staff_id: int) -> Dict[str, Any]:
        """
        Checkout already authorized elsewhere (scheduled checkouts).

        Raises:
            ResourceNotFoundError: Student or staff missing
            StudentNotCheckedInError: Student is not checked in today
        """
        staff = self.staff.find_by_id(staff_id)
        if staff is None:
            raise ResourceNotFoundError("Staff", staff_id)
        student = self._get_student(student_id)
        record = self._require_checked_in(student_id)
        return self.execute_checkout(student, staff, record)

    def execute_checkout(self, student: Student, staff: Staff, record: Attendance) -> Dict[str, Any]:
        """Apply the checkout effects in order. Only the attendance write may fail the call."""
        visit = self.state.get_current_visit(student.id)
        if visit is not None:
            self._best_effort(
                "end_visit",
                lambda: self.visits.end_visit(visit, now_utc()),
                student_id=student.id,
                visit_id=visit.id,
            )

        with self.transaction():
            self.attendance.update(
                record,
                {"check_out_time": now_utc(), "checked_out_by": staff.id},
            )
        attendance_id = record.id

        self._best_effort(
            "cancel_pending_scheduled_checkout",
            lambda: self._cancel_pending_scheduled_checkout(student.id, staff.id),
            student_id=student.id,
            staff_id=staff.id,
        )

        response_data = {
            "student_id": student.id,
            "action": "checked_out",
            "attendance_id": attendance_id,
        }
        response_data.update(self._attendance_fields(student.id))

        self._logger.info(
            f"checkout successful: student_id={student.id}",
            attendance_id=attendance_id,
            visit_id=visit.id if visit else None,
            staff_id=staff.id,
        )
        return response_data

    # -------------------------------------------------------------------------

    def _get_student(self, student_id: int) -> Student:
        student = self.students.find_by_id(student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id)
        return student

    def _require_checked_in(self, student_id: int) -> Attendance:
        snapshot = self.state.get_status(student_id)
        if snapshot.status is not AttendanceStatus.CHECKED_IN:
            raise StudentNotCheckedInError(student_id, snapshot.status)
        return self.state.get_attendance_record(student_id, snapshot.date)

    def _cancel_pending_scheduled_checkout(self, student_id: int, staff_id: int) -> Optional[ScheduledCheckout]:
        pending = self.scheduled.find_pending_for_student(student_id)
        if pending is None:
            return None

        self.scheduled.update(
            pending,
            {
                "status": ScheduledCheckoutStatus.CANCELLED,
                "cancelled_at": now_utc(),
                "cancelled_by": staff_id,
            },
        )
        self._logger.info(
            "Cancelled pending scheduled checkout",
            scheduled_checkout_id=pending.id,
            student_id=student_id,
            staff_id=staff_id,
        )
        return pending

    def _attendance_fields(self, student_id: int) -> Dict[str, Any]:
        try:
            snapshot = self.state.get_status(student_id)
        except (BaseAppException, SQLAlchemyError) as e:
            self._logger.warning(
                "Attendance re-read after checkout failed",
                student_id=student_id,
                error=str(e),
            )
            return {}

        return {
            "attendance_status": snapshot.status.value,
            "check_in_time": snapshot.check_in_time,
            "check_out_time": snapshot.check_out_time,
            "checked_in_by": snapshot.checked_in_by,
            "checked_out_by": snapshot.checked_out_by,
        }
