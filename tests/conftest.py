import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENABLE_PERIODIC_TASKS", "false")

from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ogs.core.security import Permission, create_access_token
from ogs.core.utils import local_today, now_utc
from ogs.db.session import get_db
from ogs.main import app
from ogs.models import (
    Account,
    ActiveGroup,
    Activity,
    Attendance,
    Base,
    EducationGroup,
    GroupSupervisor,
    GroupTeacher,
    Person,
    Room,
    Staff,
    Student,
    Teacher,
    Visit,
)

ALL_ATTENDANCE = (
    Permission.ATTENDANCE_READ.value,
    Permission.ATTENDANCE_CHECKIN.value,
    Permission.ATTENDANCE_CHECKOUT.value,
)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _staff(db, email: str, first_name: str, last_name: str) -> Staff:
    account = Account(email=email)
    db.add(account)
    db.flush()
    person = Person(first_name=first_name, last_name=last_name, account_id=account.id)
    db.add(person)
    db.flush()
    staff = Staff(person_id=person.id)
    db.add(staff)
    db.flush()
    return staff


def _student(db, first_name: str, school_class: str, group_id=None) -> Student:
    person = Person(first_name=first_name, last_name="Schmidt")
    db.add(person)
    db.flush()
    student = Student(person_id=person.id, school_class=school_class, group_id=group_id)
    db.add(student)
    db.flush()
    return student


@pytest.fixture()
def seed(db):
    """
    Two running groups, one ended group, and three staff members:
    the supervisor of group A, the teacher of the 3a home group and a staff
    member with no relation to anyone.
    """
    room_a = Room(name="Room 101", building="Main", capacity=25)
    room_b = Room(name="Gym", building="Annex", capacity=40)
    activity = Activity(name="Homework")
    db.add_all([room_a, room_b, activity])
    db.flush()

    home_group = EducationGroup(name="Class 3a", room_id=room_a.id)
    db.add(home_group)
    db.flush()

    supervisor = _staff(db, "anna@ogs.example", "Anna", "Berger")
    teacher_staff = _staff(db, "tom@ogs.example", "Tom", "Keller")
    outsider = _staff(db, "olga@ogs.example", "Olga", "Neumann")

    parent_account = Account(email="parent@ogs.example")
    db.add(parent_account)
    db.flush()
    db.add(Person(first_name="Paula", last_name="Parent", account_id=parent_account.id))

    teacher = Teacher(staff_id=teacher_staff.id, specialization="Maths")
    db.add(teacher)
    db.flush()
    db.add(GroupTeacher(education_group_id=home_group.id, teacher_id=teacher.id))

    student = _student(db, "Lena", "3a", group_id=home_group.id)
    other_student = _student(db, "Max", "4b")

    now = now_utc()
    group_a = ActiveGroup(activity_id=activity.id, room_id=room_a.id, start_time=now, last_activity=now)
    group_b = ActiveGroup(activity_id=activity.id, room_id=room_b.id, start_time=now, last_activity=now)
    ended_group = ActiveGroup(
        activity_id=activity.id,
        room_id=room_a.id,
        start_time=now - timedelta(hours=3),
        end_time=now - timedelta(hours=1),
    )
    db.add_all([group_a, group_b, ended_group])
    db.flush()

    db.add(GroupSupervisor(staff_id=supervisor.id, active_group_id=group_a.id, start_date=now))
    db.commit()

    return SimpleNamespace(
        room_a_id=room_a.id,
        room_b_id=room_b.id,
        activity_id=activity.id,
        home_group_id=home_group.id,
        supervisor_staff_id=supervisor.id,
        supervisor_account_id=supervisor.person.account_id,
        teacher_staff_id=teacher_staff.id,
        teacher_account_id=teacher_staff.person.account_id,
        outsider_staff_id=outsider.id,
        outsider_account_id=outsider.person.account_id,
        parent_account_id=parent_account.id,
        student_id=student.id,
        other_student_id=other_student.id,
        group_a_id=group_a.id,
        group_b_id=group_b.id,
        ended_group_id=ended_group.id,
    )


@pytest.fixture()
def place_student(db):
    """Put a student into a group with an open attendance row, bypassing the services."""

    def _place(student_id: int, group_id, staff_id: int, with_visit: bool = True) -> Attendance:
        now = now_utc()
        if with_visit:
            db.add(Visit(student_id=student_id, active_group_id=group_id, entry_time=now))
        record = Attendance(
            student_id=student_id,
            date=local_today(),
            check_in_time=now,
            checked_in_by=staff_id,
        )
        db.add(record)
        db.commit()
        return record

    return _place


def make_headers(account_id: int, permissions=ALL_ATTENDANCE) -> dict:
    token = create_access_token(account_id, permissions=permissions)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
