from ogs.services.active.active_group_service import ActiveGroupService, GroupCleanupReport
from ogs.services.active.attendance_state_service import AttendanceSnapshot, AttendanceStateService
from ogs.services.active.authorization import (
    AccessAction,
    AccessRequest,
    AuthorizationDecision,
    AuthorizationResolver,
    AuthorizationRule,
    HomeGroupTeacherRule,
    RoomSupervisorRule,
    RuleOutcome,
    TargetGroupSupervisorRule,
)
from ogs.services.active.checkin_service import CheckinService
from ogs.services.active.checkout_service import CheckoutService, StudentNotCheckedInError
from ogs.services.active.combined_group_service import CombinedGroupService
from ogs.services.active.scheduled_checkout_service import ProcessingReport, ScheduledCheckoutService

__all__ = [
    "ActiveGroupService",
    "GroupCleanupReport",
    "AttendanceSnapshot",
    "AttendanceStateService",
    "AccessAction",
    "AccessRequest",
    "AuthorizationDecision",
    "AuthorizationResolver",
    "AuthorizationRule",
    "HomeGroupTeacherRule",
    "RoomSupervisorRule",
    "RuleOutcome",
    "TargetGroupSupervisorRule",
    "CheckinService",
    "CheckoutService",
    "StudentNotCheckedInError",
    "CombinedGroupService",
    "ProcessingReport",
    "ScheduledCheckoutService",
]
