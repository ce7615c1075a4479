"""
Scheduled checkout persistence, including the claim step that keeps two
processor runs from executing the same row.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import RepositoryError
from ogs.models.active import ScheduledCheckout
from ogs.models.base.enums import ScheduledCheckoutStatus
from ogs.repositories.base import BaseRepository


class ScheduledCheckoutRepository(BaseRepository[ScheduledCheckout]):
    def __init__(self, db: Session):
        super().__init__(ScheduledCheckout, db)

    def find_pending_for_student(self, student_id: int) -> Optional[ScheduledCheckout]:
        try:
            stmt = (
                select(ScheduledCheckout)
                .where(
                    ScheduledCheckout.student_id == student_id,
                    ScheduledCheckout.status == ScheduledCheckoutStatus.PENDING,
                )
                .order_by(ScheduledCheckout.scheduled_for)
            )
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Pending checkout lookup failed: {str(e)}", table=self._table) from e

    def find_by_student(
        self, student_id: int, pending_only: bool = False, skip: int = 0, limit: int = 100
    ) -> List[ScheduledCheckout]:
        criteria = {"student_id": student_id}
        if pending_only:
            criteria["status"] = ScheduledCheckoutStatus.PENDING
        return self.find_by_criteria(criteria, skip=skip, limit=limit, order_by=["-scheduled_for"])

    def find_due(self, now: datetime, limit: int) -> List[ScheduledCheckout]:
        try:
            stmt = (
                select(ScheduledCheckout)
                .where(
                    ScheduledCheckout.status == ScheduledCheckoutStatus.PENDING,
                    ScheduledCheckout.scheduled_for <= now,
                )
                .order_by(ScheduledCheckout.scheduled_for)
                .limit(limit)
            )
            return list(self.db.execute(stmt).scalars())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Due checkout lookup failed: {str(e)}", table=self._table) from e

    def claim(self, scheduled_checkout_id: int) -> bool:
        """
        Move a row from pending to processing. Returns False if another
        runner claimed or cancelled it first.
        """
        try:
            result = self.db.execute(
                update(ScheduledCheckout)
                .where(
                    ScheduledCheckout.id == scheduled_checkout_id,
                    ScheduledCheckout.status == ScheduledCheckoutStatus.PENDING,
                )
                .values(status=ScheduledCheckoutStatus.PROCESSING)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Claim failed: {str(e)}", table=self._table) from e
