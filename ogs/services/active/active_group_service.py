"""
Administration of active groups, their supervisors and visits.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import BaseAppException, ConflictError, ErrorCode, ResourceNotFoundError
from ogs.core.utils import now_utc
from ogs.models.active import ActiveGroup, GroupSupervisor, Visit
from ogs.models.activities import Activity
from ogs.models.base.enums import SupervisorRole
from ogs.models.facilities import Room
from ogs.models.users import Staff
from ogs.repositories.active import ActiveGroupRepository, GroupSupervisorRepository, VisitRepository
from ogs.services.base import BaseService, ServiceResult


@dataclass
class GroupCleanupReport:
    """Outcome of one sweep ending running groups."""

    groups_found: int = 0
    groups_ended: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["success"] = self.success
        return data


class ActiveGroupService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.groups = ActiveGroupRepository(db_session)
        self.supervisors = GroupSupervisorRepository(db_session)
        self.visits = VisitRepository(db_session)

    # ---------------------------- groups ------------------------------------

    def list_groups(self, active_only: bool = False, skip: int = 0, limit: int = 100) -> ServiceResult[List[ActiveGroup]]:
        try:
            return ServiceResult.success(self.groups.list_groups(active_only, skip, limit))
        except BaseAppException as e:
            return self._handle_exception(e, "list_active_groups")

    def get_group(self, active_group_id: int) -> ServiceResult[ActiveGroup]:
        try:
            group = self.groups.find_by_id(active_group_id)
        except BaseAppException as e:
            return self._handle_exception(e, "get_active_group", active_group_id)
        if group is None:
            return ServiceResult.not_found("Active group", active_group_id)
        return ServiceResult.success(group)

    def create_group(self, activity_id: int, room_id: int) -> ServiceResult[ActiveGroup]:
        operation = "create_active_group"
        try:
            if self.db.get(Activity, activity_id) is None:
                raise ResourceNotFoundError("Activity", activity_id)
            if self.db.get(Room, room_id) is None:
                raise ResourceNotFoundError("Room", room_id)

            now = now_utc()
            with self.transaction():
                group = self.groups.create(
                    ActiveGroup(activity_id=activity_id, room_id=room_id, start_time=now, last_activity=now)
                )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation)

        self._logger.info("Active group started", active_group_id=group.id, room_id=room_id)
        return ServiceResult.success(group, message="Active group created successfully")

    def end_group(self, active_group_id: int) -> ServiceResult[ActiveGroup]:
        """End the session, closing open visits and supervisions with it."""
        operation = "end_active_group"
        try:
            group = self.groups.find_by_id(active_group_id)
            if group is None:
                raise ResourceNotFoundError("Active group", active_group_id)
            if not group.is_active():
                raise ConflictError("Active group has already ended", error_code=ErrorCode.GROUP_ENDED)

            now = now_utc()
            with self.transaction():
                open_visits = self.visits.find_by_group(active_group_id, active_only=True)
                for visit in open_visits:
                    self.visits.end_visit(visit, now)
                for assignment in self.supervisors.find_by_group(active_group_id, current_only=True, now=now):
                    self.supervisors.update(assignment, {"end_date": now})
                self.groups.update(group, {"end_time": now})
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, active_group_id)

        self._logger.info("Active group ended", active_group_id=active_group_id, visits_closed=len(open_visits))
        return ServiceResult.success(group, message="Active group ended successfully")

    def end_idle_groups(self, threshold: timedelta, now: Optional[datetime] = None) -> ServiceResult[GroupCleanupReport]:
        """
        End every running group without a checkin for longer than ``threshold``.

        Each group is ended on its own; one that fails (typically because it
        was ended in the meantime) is logged and skipped.
        """
        now = now or now_utc()
        try:
            groups = self.groups.find_running(idle_before=now - threshold)
        except BaseAppException as e:
            return self._handle_exception(e, "end_idle_groups")
        return ServiceResult.success(
            self._end_each([group.id for group in groups], "end_idle_groups"),
            message="Idle groups ended",
        )

    def end_all_groups(self) -> ServiceResult[GroupCleanupReport]:
        """End every running group, as done once at the close of the day."""
        try:
            groups = self.groups.find_running()
        except BaseAppException as e:
            return self._handle_exception(e, "end_all_groups")
        return ServiceResult.success(
            self._end_each([group.id for group in groups], "end_all_groups"),
            message="Running groups ended",
        )

    def _end_each(self, group_ids: List[int], operation: str) -> GroupCleanupReport:
        report = GroupCleanupReport(groups_found=len(group_ids))
        for group_id in group_ids:
            result = self.end_group(group_id)
            if result:
                report.groups_ended += 1
                continue
            self._logger.warning(
                f"{operation}: could not end group; skipping",
                active_group_id=group_id,
                error=result.error.message,
            )
            report.errors.append({"active_group_id": group_id, "error": result.error.message})

        self._logger.info(
            f"{operation} finished",
            found=report.groups_found,
            ended=report.groups_ended,
            failed=len(report.errors),
        )
        return report

    def list_visits(self, active_group_id: int, active_only: bool = False) -> ServiceResult[List[Visit]]:
        result = self.get_group(active_group_id)
        if not result:
            return result
        try:
            return ServiceResult.success(self.visits.find_by_group(active_group_id, active_only))
        except BaseAppException as e:
            return self._handle_exception(e, "list_group_visits", active_group_id)

    # -------------------------- supervisors ---------------------------------

    def list_supervisors(self, active_group_id: int, current_only: bool = False) -> ServiceResult[List[GroupSupervisor]]:
        result = self.get_group(active_group_id)
        if not result:
            return result
        try:
            return ServiceResult.success(self.supervisors.find_by_group(active_group_id, current_only))
        except BaseAppException as e:
            return self._handle_exception(e, "list_group_supervisors", active_group_id)

    def assign_supervisor(
        self,
        active_group_id: int,
        staff_id: int,
        role: SupervisorRole = SupervisorRole.SUPERVISOR,
    ) -> ServiceResult[GroupSupervisor]:
        operation = "assign_supervisor"
        try:
            group = self.groups.find_by_id(active_group_id)
            if group is None:
                raise ResourceNotFoundError("Active group", active_group_id)
            if not group.is_active():
                raise ConflictError("Active group has ended", error_code=ErrorCode.GROUP_ENDED)
            if self.db.get(Staff, staff_id) is None:
                raise ResourceNotFoundError("Staff", staff_id)
            if self.supervisors.find_open_assignment(active_group_id, staff_id) is not None:
                raise ConflictError("Staff member already supervises this group")

            with self.transaction():
                assignment = self.supervisors.create(
                    GroupSupervisor(
                        staff_id=staff_id,
                        active_group_id=active_group_id,
                        role=role,
                        start_date=now_utc(),
                    )
                )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, active_group_id)

        return ServiceResult.success(assignment, message="Supervisor assigned successfully")

    def end_supervision(self, supervisor_id: int) -> ServiceResult[GroupSupervisor]:
        operation = "end_supervision"
        try:
            assignment = self.supervisors.find_by_id(supervisor_id)
            if assignment is None:
                raise ResourceNotFoundError("Supervisor assignment", supervisor_id)
            if not assignment.is_active():
                raise ConflictError("Supervision has already ended")

            with self.transaction():
                self.supervisors.update(assignment, {"end_date": now_utc()})
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, supervisor_id)

        return ServiceResult.success(assignment, message="Supervision ended successfully")

    # ----------------------------- visits -----------------------------------

    def get_current_visit(self, student_id: int) -> ServiceResult[Optional[Visit]]:
        try:
            return ServiceResult.success(self.visits.find_active_by_student(student_id))
        except BaseAppException as e:
            return self._handle_exception(e, "get_current_visit", student_id)

    def end_visit(self, visit_id: int) -> ServiceResult[Visit]:
        """
        Close a visit without touching daily attendance; the student stays
        checked in for the day.
        """
        operation = "end_visit"
        try:
            visit = self.visits.find_by_id(visit_id)
            if visit is None:
                raise ResourceNotFoundError("Visit", visit_id)
            if not visit.is_active():
                raise ConflictError("Visit has already ended")

            with self.transaction():
                self.visits.end_visit(visit, now_utc())
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, visit_id)

        return ServiceResult.success(visit, message="Visit ended successfully")
