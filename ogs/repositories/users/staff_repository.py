"""
Staff and teacher lookups used to resolve the acting principal.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import RepositoryError
from ogs.models.users import Account, GroupTeacher, Person, Staff, Teacher
from ogs.repositories.base import BaseRepository


class StaffRepository(BaseRepository[Staff]):
    def __init__(self, db: Session):
        super().__init__(Staff, db)

    def find_by_account_id(self, account_id: int) -> Optional[Staff]:
        """
        Follow account -> person -> staff. Returns None when any link is
        missing or the account is deactivated.
        """
        try:
            stmt = (
                select(Staff)
                .join(Person, Staff.person_id == Person.id)
                .join(Account, Person.account_id == Account.id)
                .where(Account.id == account_id, Account.is_active.is_(True))
            )
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Staff lookup failed: {str(e)}", table=self._table) from e


class TeacherRepository(BaseRepository[Teacher]):
    def __init__(self, db: Session):
        super().__init__(Teacher, db)

    def find_by_staff_id(self, staff_id: int) -> Optional[Teacher]:
        return self.find_one_by_criteria({"staff_id": staff_id})

    def teaches_group(self, teacher_id: int, education_group_id: int) -> bool:
        try:
            stmt = select(GroupTeacher.id).where(
                GroupTeacher.teacher_id == teacher_id,
                GroupTeacher.education_group_id == education_group_id,
            )
            return self.db.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Group teacher lookup failed: {str(e)}", table="group_teachers") from e
