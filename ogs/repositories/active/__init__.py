from ogs.repositories.active.active_group_repository import (
    ActiveGroupRepository,
    CombinedGroupRepository,
    GroupSupervisorRepository,
)
from ogs.repositories.active.attendance_repository import AttendanceRepository
from ogs.repositories.active.scheduled_checkout_repository import ScheduledCheckoutRepository
from ogs.repositories.active.visit_repository import VisitRepository

__all__ = [
    "ActiveGroupRepository",
    "GroupSupervisorRepository",
    "CombinedGroupRepository",
    "VisitRepository",
    "AttendanceRepository",
    "ScheduledCheckoutRepository",
]
