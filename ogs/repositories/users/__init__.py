from ogs.repositories.users.staff_repository import StaffRepository, TeacherRepository
from ogs.repositories.users.student_repository import StudentRepository

__all__ = ["StaffRepository", "TeacherRepository", "StudentRepository"]
