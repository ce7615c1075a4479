from ogs.models.active.active_group import ActiveGroup, CombinedGroup, GroupMapping, GroupSupervisor
from ogs.models.active.attendance import Attendance
from ogs.models.active.scheduled_checkout import ScheduledCheckout
from ogs.models.active.visit import Visit

__all__ = [
    "ActiveGroup",
    "GroupSupervisor",
    "CombinedGroup",
    "GroupMapping",
    "Visit",
    "Attendance",
    "ScheduledCheckout",
]
