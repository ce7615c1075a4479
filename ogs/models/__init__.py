"""
SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from ogs.models.base import Base, BaseModel, TimestampModel
from ogs.models.facilities import Room
from ogs.models.activities import Activity
from ogs.models.users import (
    Account,
    EducationGroup,
    GroupTeacher,
    Person,
    Staff,
    Student,
    Teacher,
)
from ogs.models.active import (
    ActiveGroup,
    Attendance,
    CombinedGroup,
    GroupMapping,
    GroupSupervisor,
    ScheduledCheckout,
    Visit,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "Room",
    "Activity",
    "Account",
    "Person",
    "Staff",
    "Teacher",
    "EducationGroup",
    "GroupTeacher",
    "Student",
    "ActiveGroup",
    "GroupSupervisor",
    "CombinedGroup",
    "GroupMapping",
    "Visit",
    "Attendance",
    "ScheduledCheckout",
]
