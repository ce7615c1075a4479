"""
Date and time helpers.

Timestamps are persisted as naive UTC. The attendance day is the calendar
date in the configured local timezone.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .config import settings


class DateTimeUtils:
    """Date and time utility functions"""

    @staticmethod
    def now_utc() -> datetime:
        """Current UTC time without tzinfo, as stored in the database."""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def local_today() -> date:
        """Today's date in the facility's timezone."""
        return datetime.now(ZoneInfo(settings.TIMEZONE)).date()

    @staticmethod
    def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
        """Normalize an incoming datetime to naive UTC."""
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)


now_utc = DateTimeUtils.now_utc
local_today = DateTimeUtils.local_today
