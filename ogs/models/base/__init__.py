from ogs.models.base.base_model import Base, BaseModel, TimestampModel
from ogs.models.base.enums import AttendanceStatus, ScheduledCheckoutStatus, SupervisorRole

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "AttendanceStatus",
    "ScheduledCheckoutStatus",
    "SupervisorRole",
]
