"""
Live room sessions and the staff supervising them.

An ActiveGroup is one running instance of an activity in a room. Ending it
sets ``end_time``; an ended group never becomes active again.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ogs.core.utils import now_utc
from ogs.models.base.base_model import TimestampModel
from ogs.models.base.enums import SupervisorRole
from ogs.models.facilities.room import Room

__all__ = ["ActiveGroup", "GroupSupervisor", "CombinedGroup", "GroupMapping"]


class ActiveGroup(TimestampModel):
    __tablename__ = "active_groups"

    activity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    room_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime, default=now_utc, nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    last_activity: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    room: Mapped[Room] = relationship(Room, lazy="joined")
    supervisors: Mapped[List["GroupSupervisor"]] = relationship(
        "GroupSupervisor", back_populates="active_group", lazy="selectin"
    )

    def is_active(self) -> bool:
        return self.end_time is None


class GroupSupervisor(TimestampModel):
    """Assignment of a staff member to an active group."""

    __tablename__ = "group_supervisors"

    staff_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True
    )
    active_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("active_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[SupervisorRole] = mapped_column(
        Enum(SupervisorRole, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=SupervisorRole.SUPERVISOR,
        nullable=False,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime, default=now_utc, nullable=False)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    active_group: Mapped[ActiveGroup] = relationship(ActiveGroup, back_populates="supervisors")

    def is_active(self) -> bool:
        return self.end_date is None or self.end_date > now_utc()


class CombinedGroup(TimestampModel):
    """Administrative bundle of several active groups."""

    __tablename__ = "combined_groups"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, default=now_utc, nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    mappings: Mapped[List["GroupMapping"]] = relationship(
        "GroupMapping", lazy="selectin", cascade="all, delete-orphan"
    )

    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def active_group_ids(self) -> List[int]:
        return [mapping.active_group_id for mapping in self.mappings]


class GroupMapping(TimestampModel):
    __tablename__ = "group_mappings"
    __table_args__ = (
        UniqueConstraint("combined_group_id", "active_group_id", name="uq_group_mapping"),
    )

    combined_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("combined_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    active_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("active_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
