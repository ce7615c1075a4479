from ogs.models.users.people import (
    Account,
    EducationGroup,
    GroupTeacher,
    Person,
    Staff,
    Student,
    Teacher,
)

__all__ = [
    "Account",
    "Person",
    "Staff",
    "Teacher",
    "EducationGroup",
    "GroupTeacher",
    "Student",
]
