from ogs.schemas.active.active_group import (
    ActiveGroupCreate,
    ActiveGroupResponse,
    CombinedGroupCreate,
    CombinedGroupResponse,
    GroupMappingCreate,
    SupervisorCreate,
    SupervisorResponse,
)
from ogs.schemas.active.scheduled_checkout import (
    ProcessingResponse,
    ScheduledCheckoutCreate,
    ScheduledCheckoutResponse,
)
from ogs.schemas.active.visit import (
    AttendanceStatusData,
    CheckinData,
    CheckinRequest,
    CheckoutData,
    VisitResponse,
)

__all__ = [
    "ActiveGroupCreate",
    "ActiveGroupResponse",
    "CombinedGroupCreate",
    "CombinedGroupResponse",
    "GroupMappingCreate",
    "SupervisorCreate",
    "SupervisorResponse",
    "ProcessingResponse",
    "ScheduledCheckoutCreate",
    "ScheduledCheckoutResponse",
    "AttendanceStatusData",
    "CheckinData",
    "CheckinRequest",
    "CheckoutData",
    "VisitResponse",
]
