"""Activity definitions instantiated by active groups."""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ogs.models.base.base_model import TimestampModel

__all__ = ["Activity"]


class Activity(TimestampModel):
    """A recurring activity offered by the facility (homework room, football, ...)."""

    __tablename__ = "activities"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
