"""
Scheduled checkouts: staff plan a student's checkout for a later time and a
periodic processor executes the ones that are due.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.config import settings
from ogs.core.exceptions import (
    BaseAppException,
    ConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from ogs.core.utils import now_utc
from ogs.models.active import ScheduledCheckout
from ogs.models.base.enums import ScheduledCheckoutStatus
from ogs.models.users import Student
from ogs.repositories.active import ScheduledCheckoutRepository
from ogs.repositories.users import StudentRepository
from ogs.services.active.authorization import AccessAction, AuthorizationResolver
from ogs.services.active.checkout_service import CheckoutService
from ogs.services.base import BaseService, ServiceResult


@dataclass
class ProcessingReport:
    """Outcome of one processor run."""

    checkouts_attempted: int = 0
    checkouts_executed: int = 0
    checkouts_failed: int = 0
    checkouts_skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.checkouts_failed == 0

    @property
    def partial(self) -> bool:
        return self.checkouts_failed > 0 and self.checkouts_executed > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["success"] = self.success
        return data


class ScheduledCheckoutService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.scheduled = ScheduledCheckoutRepository(db_session)
        self.students = StudentRepository(db_session)
        self.authorization = AuthorizationResolver(db_session)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(
        self,
        account_id: int,
        student_id: int,
        scheduled_for: datetime,
        reason: Optional[str] = None,
    ) -> ServiceResult[ScheduledCheckout]:
        operation = "schedule_checkout"
        try:
            staff = self.authorization.resolve_staff(account_id)
            student = self._get_student(student_id)
            if scheduled_for <= now_utc():
                raise ValidationError(
                    "scheduled_for must be in the future",
                    field_errors={"scheduled_for": ["must be in the future"]},
                )
            self.authorization.ensure_authorized(staff, student, AccessAction.SCHEDULE_CHECKOUT)

            existing = self.scheduled.find_pending_for_student(student_id)
            if existing is not None:
                raise ConflictError(
                    "Student already has a pending scheduled checkout",
                    details={"scheduled_checkout_id": existing.id},
                )

            with self.transaction():
                scheduled = self.scheduled.create(
                    ScheduledCheckout(
                        student_id=student_id,
                        scheduled_by=staff.id,
                        scheduled_for=scheduled_for,
                        reason=reason,
                        status=ScheduledCheckoutStatus.PENDING,
                    )
                )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, student_id)

        self._logger.info(
            "Scheduled checkout created",
            scheduled_checkout_id=scheduled.id,
            student_id=student_id,
            scheduled_for=scheduled_for.isoformat(),
            staff_id=staff.id,
        )
        return ServiceResult.success(scheduled, message="Checkout scheduled successfully")

    def get(self, scheduled_checkout_id: int) -> ServiceResult[ScheduledCheckout]:
        try:
            scheduled = self.scheduled.find_by_id(scheduled_checkout_id)
        except BaseAppException as e:
            return self._handle_exception(e, "get_scheduled_checkout", scheduled_checkout_id)
        if scheduled is None:
            return ServiceResult.not_found("Scheduled checkout", scheduled_checkout_id)
        return ServiceResult.success(scheduled)

    def list_for_student(
        self, student_id: int, pending_only: bool = False, skip: int = 0, limit: int = 100
    ) -> ServiceResult[List[ScheduledCheckout]]:
        try:
            self._get_student(student_id)
            items = self.scheduled.find_by_student(student_id, pending_only=pending_only, skip=skip, limit=limit)
        except BaseAppException as e:
            return self._handle_exception(e, "list_scheduled_checkouts", student_id)
        return ServiceResult.success(items)

    def cancel(self, account_id: int, scheduled_checkout_id: int) -> ServiceResult[ScheduledCheckout]:
        """
        Cancel a pending scheduled checkout. Cancelling one that is already
        cancelled returns it unchanged.
        """
        operation = "cancel_scheduled_checkout"
        try:
            staff = self.authorization.resolve_staff(account_id)
            scheduled = self.scheduled.find_by_id(scheduled_checkout_id)
            if scheduled is None:
                raise ResourceNotFoundError("Scheduled checkout", scheduled_checkout_id)

            if scheduled.status is ScheduledCheckoutStatus.CANCELLED:
                return ServiceResult.success(scheduled, message="Scheduled checkout already cancelled")

            if scheduled.status is not ScheduledCheckoutStatus.PENDING:
                raise ConflictError(
                    f"Scheduled checkout is {scheduled.status.value} and can no longer be cancelled",
                    details={"status": scheduled.status.value},
                )

            student = self._get_student(scheduled.student_id)
            self.authorization.ensure_authorized(staff, student, AccessAction.SCHEDULE_CHECKOUT)

            with self.transaction():
                self.scheduled.update(
                    scheduled,
                    {
                        "status": ScheduledCheckoutStatus.CANCELLED,
                        "cancelled_at": now_utc(),
                        "cancelled_by": staff.id,
                    },
                )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, scheduled_checkout_id)

        self._logger.info(
            "Scheduled checkout cancelled",
            scheduled_checkout_id=scheduled_checkout_id,
            staff_id=staff.id,
        )
        return ServiceResult.success(scheduled, message="Scheduled checkout cancelled")

    # -------------------------------------------------------------------------
    # Processor
    # -------------------------------------------------------------------------

    def process_due(self, now: Optional[datetime] = None, limit: Optional[int] = None) -> ServiceResult[ProcessingReport]:
        """
        Execute every pending checkout whose time has come.

        Each row is claimed before it runs, so concurrent runs never execute
        the same checkout twice. The scheduling staff member is recorded as
        the one checking the student out.
        """
        operation = "process_scheduled_checkouts"
        now = now or now_utc()
        limit = limit or settings.tasks.SCHEDULED_CHECKOUT_BATCH_SIZE
        report = ProcessingReport()

        try:
            due = self.scheduled.find_due(now, limit)
        except BaseAppException as e:
            return self._handle_exception(e, operation)

        due_ids = [(item.id, item.student_id, item.scheduled_by) for item in due]
        self._logger.info(f"{operation}: {len(due_ids)} due", now=now.isoformat())

        checkout = CheckoutService(self.db)
        for scheduled_id, student_id, staff_id in due_ids:
            try:
                claimed = self.scheduled.claim(scheduled_id)
            except BaseAppException as e:
                self._logger.error("Could not claim scheduled checkout", scheduled_checkout_id=scheduled_id, error=str(e))
                report.checkouts_attempted += 1
                report.checkouts_failed += 1
                report.errors.append({"scheduled_checkout_id": scheduled_id, "student_id": student_id, "error": e.message})
                continue

            if not claimed:
                report.checkouts_skipped += 1
                continue

            report.checkouts_attempted += 1
            try:
                checkout.checkout_as_staff(student_id, staff_id)
            except (BaseAppException, SQLAlchemyError) as e:
                self._rollback()
                message = e.message if isinstance(e, BaseAppException) else str(e)
                self._logger.warning(
                    "Scheduled checkout failed",
                    scheduled_checkout_id=scheduled_id,
                    student_id=student_id,
                    error=message,
                )
                report.checkouts_failed += 1
                report.errors.append({"scheduled_checkout_id": scheduled_id, "student_id": student_id, "error": message})
                self._finish(scheduled_id, ScheduledCheckoutStatus.FAILED, message)
                continue

            report.checkouts_executed += 1
            self._finish(scheduled_id, ScheduledCheckoutStatus.EXECUTED)

        self._logger.info(
            f"{operation} finished",
            attempted=report.checkouts_attempted,
            executed=report.checkouts_executed,
            failed=report.checkouts_failed,
            skipped=report.checkouts_skipped,
        )
        return ServiceResult.success(report, message=self._summary(report))

    def _finish(self, scheduled_id: int, status: ScheduledCheckoutStatus, error: Optional[str] = None) -> None:
        def apply():
            scheduled = self.scheduled.find_by_id(scheduled_id)
            self.scheduled.update(
                scheduled,
                {"status": status, "executed_at": now_utc(), "error_message": error},
            )

        self._best_effort("finish_scheduled_checkout", apply, scheduled_checkout_id=scheduled_id, status=status.value)

    @staticmethod
    def _summary(report: ProcessingReport) -> str:
        if report.checkouts_attempted == 0:
            return "No scheduled checkouts due"
        if report.success:
            return f"Executed {report.checkouts_executed} scheduled checkouts"
        return (
            f"Executed {report.checkouts_executed} of {report.checkouts_attempted} "
            f"scheduled checkouts; {report.checkouts_failed} failed"
        )

    def _get_student(self, student_id: int) -> Student:
        student = self.students.find_by_id(student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id)
        return student
