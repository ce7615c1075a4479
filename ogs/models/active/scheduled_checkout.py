"""Checkouts scheduled by staff for later execution."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ogs.models.base.base_model import TimestampModel
from ogs.models.base.enums import ScheduledCheckoutStatus

__all__ = ["ScheduledCheckout"]


class ScheduledCheckout(TimestampModel):
    __tablename__ = "scheduled_checkouts"

    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False
    )
    scheduled_for: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[ScheduledCheckoutStatus] = mapped_column(
        Enum(
            ScheduledCheckoutStatus,
            values_callable=lambda e: [m.value for m in e],
            native_enum=False,
            length=20,
        ),
        default=ScheduledCheckoutStatus.PENDING,
        nullable=False,
        index=True,
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cancelled_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=True
    )
    executed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
