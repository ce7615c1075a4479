from datetime import timedelta

import pytest

from ogs.core.exceptions import AttendanceNotFoundError
from ogs.core.utils import local_today, now_utc
from ogs.models import Attendance
from ogs.models.base.enums import AttendanceStatus
from ogs.services.active import AttendanceStateService


def test_missing_row_reads_as_not_checked_in(db, seed):
    snapshot = AttendanceStateService(db).get_status(seed.student_id)

    assert snapshot.status is AttendanceStatus.NOT_CHECKED_IN
    assert snapshot.attendance_id is None
    assert snapshot.date == local_today()


def test_get_attendance_record_raises_when_absent(db, seed):
    with pytest.raises(AttendanceNotFoundError):
        AttendanceStateService(db).get_attendance_record(seed.student_id)


def test_open_row_is_checked_in(db, seed, place_student):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id, with_visit=False)

    snapshot = AttendanceStateService(db).get_status(seed.student_id)

    assert snapshot.status is AttendanceStatus.CHECKED_IN
    assert snapshot.checked_in_by == "Anna Berger"
    assert snapshot.check_out_time is None


def test_closed_row_is_checked_out(db, seed):
    now = now_utc()
    db.add(
        Attendance(
            student_id=seed.student_id,
            date=local_today(),
            check_in_time=now - timedelta(hours=2),
            checked_in_by=seed.supervisor_staff_id,
            check_out_time=now,
            checked_out_by=seed.teacher_staff_id,
        )
    )
    db.commit()

    snapshot = AttendanceStateService(db).get_status(seed.student_id)

    assert snapshot.status is AttendanceStatus.CHECKED_OUT
    assert snapshot.checked_out_by == "Tom Keller"
    assert snapshot.to_dict()["status"] == "checked_out"


def test_yesterdays_row_does_not_count_for_today(db, seed):
    yesterday = local_today() - timedelta(days=1)
    db.add(
        Attendance(
            student_id=seed.student_id,
            date=yesterday,
            check_in_time=now_utc() - timedelta(days=1),
            checked_in_by=seed.supervisor_staff_id,
        )
    )
    db.commit()

    service = AttendanceStateService(db)

    assert service.get_status(seed.student_id).status is AttendanceStatus.NOT_CHECKED_IN
    assert service.get_status(seed.student_id, day=yesterday).status is AttendanceStatus.CHECKED_IN


def test_visit_is_read_independently_of_attendance(db, seed, place_student):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id, with_visit=False)

    assert AttendanceStateService(db).get_current_visit(seed.student_id) is None
