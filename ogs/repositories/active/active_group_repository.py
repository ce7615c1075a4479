"""
Repositories for active groups, their supervisors and combined groups.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import RepositoryError
from ogs.core.utils import now_utc
from ogs.models.active import ActiveGroup, CombinedGroup, GroupMapping, GroupSupervisor
from ogs.repositories.base import BaseRepository


class ActiveGroupRepository(BaseRepository[ActiveGroup]):
    def __init__(self, db: Session):
        super().__init__(ActiveGroup, db)

    def list_groups(self, active_only: bool = False, skip: int = 0, limit: int = 100) -> List[ActiveGroup]:
        try:
            stmt = select(ActiveGroup).order_by(ActiveGroup.start_time.desc())
            if active_only:
                stmt = stmt.where(ActiveGroup.end_time.is_(None))
            return list(self.db.execute(stmt.offset(skip).limit(limit)).scalars().unique())
        except SQLAlchemyError as e:
            raise RepositoryError(f"List active groups failed: {str(e)}", table=self._table) from e

    def find_running(self, idle_before: Optional[datetime] = None) -> List[ActiveGroup]:
        """
        Groups that have not ended. With ``idle_before``, only those whose last
        activity is older; a group that never saw a checkin counts from its start.
        """
        try:
            stmt = select(ActiveGroup).where(ActiveGroup.end_time.is_(None))
            if idle_before is not None:
                stmt = stmt.where(func.coalesce(ActiveGroup.last_activity, ActiveGroup.start_time) < idle_before)
            stmt = stmt.order_by(ActiveGroup.id)
            return list(self.db.execute(stmt).scalars().unique())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Running group lookup failed: {str(e)}", table=self._table) from e


class GroupSupervisorRepository(BaseRepository[GroupSupervisor]):
    def __init__(self, db: Session):
        super().__init__(GroupSupervisor, db)

    def find_by_group(
        self, active_group_id: int, current_only: bool = False, now: Optional[datetime] = None
    ) -> List[GroupSupervisor]:
        """
        Supervisions of a group. ``current_only`` keeps those still active at
        ``now``: not ended, or ending in the future.
        """
        try:
            stmt = select(GroupSupervisor).where(GroupSupervisor.active_group_id == active_group_id)
            if current_only:
                now = now or now_utc()
                stmt = stmt.where(or_(GroupSupervisor.end_date.is_(None), GroupSupervisor.end_date > now))
            return list(self.db.execute(stmt.order_by(GroupSupervisor.start_date)).scalars())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Supervisor lookup failed: {str(e)}", table=self._table) from e

    def find_open_assignment(self, active_group_id: int, staff_id: int) -> Optional[GroupSupervisor]:
        """Supervision of ``staff_id`` on the group that has not been ended."""
        try:
            stmt = select(GroupSupervisor).where(
                GroupSupervisor.active_group_id == active_group_id,
                GroupSupervisor.staff_id == staff_id,
                GroupSupervisor.end_date.is_(None),
            )
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Supervisor lookup failed: {str(e)}", table=self._table) from e


class CombinedGroupRepository(BaseRepository[CombinedGroup]):
    def __init__(self, db: Session):
        super().__init__(CombinedGroup, db)

    def find_mapping(self, combined_group_id: int, active_group_id: int) -> Optional[GroupMapping]:
        try:
            stmt = select(GroupMapping).where(
                GroupMapping.combined_group_id == combined_group_id,
                GroupMapping.active_group_id == active_group_id,
            )
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Group mapping lookup failed: {str(e)}", table="group_mappings") from e
