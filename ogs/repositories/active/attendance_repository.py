from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import RepositoryError
from ogs.models.active import Attendance
from ogs.repositories.base import BaseRepository


class AttendanceRepository(BaseRepository[Attendance]):
    def __init__(self, db: Session):
        super().__init__(Attendance, db)

    def find_for_student_on(self, student_id: int, day: date) -> Optional[Attendance]:
        try:
            stmt = select(Attendance).where(
                Attendance.student_id == student_id,
                Attendance.date == day,
            )
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Attendance lookup failed: {str(e)}", table=self._table) from e
