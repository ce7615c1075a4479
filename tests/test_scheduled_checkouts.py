from datetime import timedelta

import pytest

from ogs.core.utils import now_utc
from ogs.models import Attendance, ScheduledCheckout
from ogs.models.base.enums import ScheduledCheckoutStatus
from ogs.repositories.active import ScheduledCheckoutRepository
from ogs.services.active import ScheduledCheckoutService
from ogs.services.base import ErrorCode
from ogs.tasks.scheduled_checkouts import run_scheduled_checkout_processing


@pytest.fixture()
def due_checkout(db):
    def _due(student_id: int, staff_id: int, minutes_ago: int = 5) -> ScheduledCheckout:
        scheduled = ScheduledCheckout(
            student_id=student_id,
            scheduled_by=staff_id,
            scheduled_for=now_utc() - timedelta(minutes=minutes_ago),
            reason="Picked up by grandparents",
        )
        db.add(scheduled)
        db.commit()
        return scheduled

    return _due


# ----------------------------- create / cancel ------------------------------


def test_teacher_schedules_checkout(db, seed):
    when = now_utc() + timedelta(hours=1)

    result = ScheduledCheckoutService(db).create(seed.teacher_account_id, seed.student_id, when, "Dentist")

    assert result.is_success, result.error
    scheduled = result.data
    assert scheduled.status is ScheduledCheckoutStatus.PENDING
    assert scheduled.scheduled_by == seed.teacher_staff_id
    assert scheduled.reason == "Dentist"


def test_schedule_in_the_past_is_rejected(db, seed):
    result = ScheduledCheckoutService(db).create(
        seed.teacher_account_id, seed.student_id, now_utc() - timedelta(minutes=1)
    )
    assert result.error.code is ErrorCode.VALIDATION_ERROR


def test_only_one_pending_checkout_per_student(db, seed):
    service = ScheduledCheckoutService(db)
    when = now_utc() + timedelta(hours=1)
    assert service.create(seed.teacher_account_id, seed.student_id, when).is_success

    result = service.create(seed.teacher_account_id, seed.student_id, when + timedelta(hours=1))

    assert result.error.code is ErrorCode.CONFLICT


def test_scheduling_requires_authorization(db, seed):
    result = ScheduledCheckoutService(db).create(
        seed.outsider_account_id, seed.student_id, now_utc() + timedelta(hours=1)
    )
    assert result.error.code is ErrorCode.INSUFFICIENT_PERMISSIONS


def test_cancel_is_idempotent(db, seed):
    service = ScheduledCheckoutService(db)
    created = service.create(seed.teacher_account_id, seed.student_id, now_utc() + timedelta(hours=1)).data

    first = service.cancel(seed.teacher_account_id, created.id)
    assert first.is_success, first.error
    cancelled_at = first.data.cancelled_at

    second = service.cancel(seed.teacher_account_id, created.id)
    assert second.is_success
    assert second.data.status is ScheduledCheckoutStatus.CANCELLED
    assert second.data.cancelled_at == cancelled_at
    assert second.data.cancelled_by == seed.teacher_staff_id


def test_cancel_executed_checkout_is_a_conflict(db, seed, due_checkout):
    scheduled = due_checkout(seed.student_id, seed.teacher_staff_id)
    scheduled.status = ScheduledCheckoutStatus.EXECUTED
    db.commit()

    result = ScheduledCheckoutService(db).cancel(seed.teacher_account_id, scheduled.id)

    assert result.error.code is ErrorCode.CONFLICT


def test_cancel_unknown_checkout_is_not_found(db, seed):
    result = ScheduledCheckoutService(db).cancel(seed.teacher_account_id, 4242)
    assert result.error.code is ErrorCode.NOT_FOUND


def test_list_for_student_filters_pending(db, seed, due_checkout):
    done = due_checkout(seed.student_id, seed.teacher_staff_id, minutes_ago=60)
    done.status = ScheduledCheckoutStatus.CANCELLED
    db.commit()
    due_checkout(seed.student_id, seed.teacher_staff_id)
    service = ScheduledCheckoutService(db)

    assert len(service.list_for_student(seed.student_id).data) == 2
    pending = service.list_for_student(seed.student_id, pending_only=True).data
    assert [item.status for item in pending] == [ScheduledCheckoutStatus.PENDING]


def test_list_for_student_pages_through_history(db, seed, due_checkout):
    for minutes_ago in (30, 20, 10):
        item = due_checkout(seed.student_id, seed.teacher_staff_id, minutes_ago=minutes_ago)
        item.status = ScheduledCheckoutStatus.CANCELLED
    db.commit()
    service = ScheduledCheckoutService(db)

    first = service.list_for_student(seed.student_id, limit=2).data
    rest = service.list_for_student(seed.student_id, skip=2, limit=2).data

    assert len(first) == 2
    assert len(rest) == 1
    assert first[0].scheduled_for > first[1].scheduled_for > rest[0].scheduled_for


# -------------------------------- processor ---------------------------------


def test_claim_succeeds_once(db, seed, due_checkout):
    scheduled = due_checkout(seed.student_id, seed.teacher_staff_id)
    repository = ScheduledCheckoutRepository(db)

    assert repository.claim(scheduled.id) is True
    assert repository.claim(scheduled.id) is False


def test_nothing_due_is_a_full_success(db, seed):
    db.add(
        ScheduledCheckout(
            student_id=seed.student_id,
            scheduled_by=seed.teacher_staff_id,
            scheduled_for=now_utc() + timedelta(hours=1),
        )
    )
    db.commit()

    report = ScheduledCheckoutService(db).process_due().data

    assert report.checkouts_attempted == 0
    assert report.success
    assert db.query(ScheduledCheckout).one().status is ScheduledCheckoutStatus.PENDING


def test_due_checkout_is_executed_as_the_scheduling_staff(db, seed, place_student, due_checkout):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)
    scheduled = due_checkout(seed.student_id, seed.teacher_staff_id)

    result = ScheduledCheckoutService(db).process_due()

    report = result.data
    assert report.checkouts_attempted == 1
    assert report.checkouts_executed == 1
    assert report.success and not report.partial

    db.expire_all()
    row = db.get(ScheduledCheckout, scheduled.id)
    assert row.status is ScheduledCheckoutStatus.EXECUTED
    assert row.executed_at is not None
    assert db.query(Attendance).one().checked_out_by == seed.teacher_staff_id


def test_failed_checkout_is_recorded_and_others_continue(db, seed, place_student, due_checkout):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)
    ok = due_checkout(seed.student_id, seed.teacher_staff_id, minutes_ago=10)
    broken = due_checkout(seed.other_student_id, seed.supervisor_staff_id, minutes_ago=5)

    report = ScheduledCheckoutService(db).process_due().data

    assert report.checkouts_attempted == 2
    assert report.checkouts_executed == 1
    assert report.checkouts_failed == 1
    assert report.partial
    assert report.errors[0]["scheduled_checkout_id"] == broken.id
    assert report.errors[0]["student_id"] == seed.other_student_id

    db.expire_all()
    assert db.get(ScheduledCheckout, ok.id).status is ScheduledCheckoutStatus.EXECUTED
    failed = db.get(ScheduledCheckout, broken.id)
    assert failed.status is ScheduledCheckoutStatus.FAILED
    assert failed.error_message == "Student is not currently checked in"


def test_rows_claimed_elsewhere_are_skipped(db, seed, place_student, due_checkout, monkeypatch):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)
    due_checkout(seed.student_id, seed.teacher_staff_id)
    service = ScheduledCheckoutService(db)
    monkeypatch.setattr(service.scheduled, "claim", lambda scheduled_id: False)

    report = service.process_due().data

    assert report.checkouts_attempted == 0
    assert report.checkouts_skipped == 1
    assert db.query(Attendance).one().check_out_time is None


def test_periodic_task_helper_uses_its_own_session(seed, place_student, due_checkout, session_factory):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)
    due_checkout(seed.student_id, seed.teacher_staff_id)

    body = run_scheduled_checkout_processing(session_factory)

    assert body["success"] is True
    assert body["checkouts_executed"] == 1
    assert body["message"] == "Executed 1 scheduled checkouts"
