"""Student occupancy of an active group."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ogs.core.utils import now_utc
from ogs.models.active.active_group import ActiveGroup
from ogs.models.base.base_model import TimestampModel

__all__ = ["Visit"]


class Visit(TimestampModel):
    """
    A student's stay in one active group.

    At most one visit per student may be open (``exit_time IS NULL``); the
    partial unique index enforces that even for concurrent checkins.
    """

    __tablename__ = "visits"
    __table_args__ = (
        Index(
            "uq_visits_open_per_student",
            "student_id",
            unique=True,
            postgresql_where=text("exit_time IS NULL"),
            sqlite_where=text("exit_time IS NULL"),
        ),
    )

    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    active_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("active_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    entry_time: Mapped[datetime] = mapped_column(DateTime, default=now_utc, nullable=False)
    exit_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    active_group: Mapped[ActiveGroup] = relationship(ActiveGroup, lazy="joined")

    def is_active(self) -> bool:
        return self.exit_time is None
