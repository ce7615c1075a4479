"""
Base model configuration for SQLAlchemy ORM.

Provides the declarative base and the abstract classes every table
inherits: an integer primary key, snake_case table naming and
creation/update timestamps.
"""

import re
from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, declarative_base, declared_attr, mapped_column

from ogs.core.utils import now_utc

Base = declarative_base()


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr
    def __tablename__(cls) -> str:
        """Generate table name from class name (ActiveGroup -> active_groups)."""
        name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", cls.__name__)
        return re.sub("([a-z0-9])([A-Z])", r"\1_\2", name).lower() + "s"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"


class TimestampModel(BaseModel):
    """
    Abstract model adding created_at and updated_at columns.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=now_utc, onupdate=now_utc, nullable=False
    )
