"""
Identity models: accounts, persons, staff, teachers and students.

The authenticated principal is an Account. Staff membership is resolved
account -> person -> staff; teachers are staff assigned to education groups.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ogs.models.base.base_model import TimestampModel

__all__ = [
    "Account",
    "Person",
    "Staff",
    "Teacher",
    "EducationGroup",
    "GroupTeacher",
    "Student",
]


class Account(TimestampModel):
    """Login identity referenced by the token subject."""

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Person(TimestampModel):
    """A real person; optionally linked to an account."""

    __tablename__ = "persons"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), unique=True, nullable=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Staff(TimestampModel):
    """Employee of the facility."""

    __tablename__ = "staff"

    person_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("persons.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    staff_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    person: Mapped[Person] = relationship(Person, lazy="joined")

    @property
    def display_name(self) -> str:
        return self.person.full_name if self.person else f"Staff {self.id}"


class Teacher(TimestampModel):
    """Staff member who teaches one or more education groups."""

    __tablename__ = "teachers"

    staff_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("staff.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    specialization: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class EducationGroup(TimestampModel):
    """A student's permanent home group."""

    __tablename__ = "education_groups"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    room_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )


class GroupTeacher(TimestampModel):
    """Assignment of a teacher to an education group."""

    __tablename__ = "group_teachers"
    __table_args__ = (
        UniqueConstraint("education_group_id", "teacher_id", name="uq_group_teacher"),
    )

    education_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("education_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True
    )


class Student(TimestampModel):
    """Child enrolled in after-school care."""

    __tablename__ = "students"

    person_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("persons.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    school_class: Mapped[str] = mapped_column(String(20), nullable=False)
    group_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("education_groups.id", ondelete="SET NULL"), nullable=True, index=True
    )

    person: Mapped[Person] = relationship(Person, lazy="joined")
