"""
Database enums shared by models and schemas.
"""

import enum


class AttendanceStatus(str, enum.Enum):
    """Derived daily attendance state of a student."""
    NOT_CHECKED_IN = "not_checked_in"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class ScheduledCheckoutStatus(str, enum.Enum):
    """Lifecycle of a deferred checkout."""
    PENDING = "pending"
    PROCESSING = "processing"
    EXECUTED = "executed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SupervisorRole(str, enum.Enum):
    """Role of a staff member within an active group."""
    SUPERVISOR = "supervisor"
    ASSISTANT = "assistant"
