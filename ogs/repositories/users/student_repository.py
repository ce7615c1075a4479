from sqlalchemy.orm import Session

from ogs.models.users import Student
from ogs.repositories.base import BaseRepository


class StudentRepository(BaseRepository[Student]):
    def __init__(self, db: Session):
        super().__init__(Student, db)
