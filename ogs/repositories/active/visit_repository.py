from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import RepositoryError
from ogs.models.active import Visit
from ogs.repositories.base import BaseRepository


class VisitRepository(BaseRepository[Visit]):
    def __init__(self, db: Session):
        super().__init__(Visit, db)

    def find_active_by_student(self, student_id: int) -> Optional[Visit]:
        try:
            stmt = (
                select(Visit)
                .where(Visit.student_id == student_id, Visit.exit_time.is_(None))
                .order_by(Visit.entry_time.desc())
            )
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Active visit lookup failed: {str(e)}", table=self._table) from e

    def find_by_group(self, active_group_id: int, active_only: bool = False) -> List[Visit]:
        try:
            stmt = select(Visit).where(Visit.active_group_id == active_group_id)
            if active_only:
                stmt = stmt.where(Visit.exit_time.is_(None))
            return list(self.db.execute(stmt.order_by(Visit.entry_time)).scalars())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Visit lookup failed: {str(e)}", table=self._table) from e

    def end_visit(self, visit: Visit, exit_time: datetime) -> Visit:
        return self.update(visit, {"exit_time": exit_time})
