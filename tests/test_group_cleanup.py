from datetime import timedelta

from ogs.core.utils import now_utc
from ogs.models import ActiveGroup, GroupSupervisor, Visit
from ogs.services.active import ActiveGroupService
from ogs.tasks.celery_app import _build_beat_schedule
from ogs.tasks.group_cleanup import run_daily_group_end, run_idle_group_cleanup


def _go_quiet(db, group_id, minutes):
    group = db.get(ActiveGroup, group_id)
    group.last_activity = now_utc() - timedelta(minutes=minutes)
    db.commit()


def test_idle_group_is_ended_with_its_visits_and_supervisions(db, seed, place_student):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)
    _go_quiet(db, seed.group_a_id, minutes=90)

    result = ActiveGroupService(db).end_idle_groups(timedelta(minutes=60))

    assert result
    assert result.data.groups_found == 1
    assert result.data.groups_ended == 1
    db.expire_all()
    assert db.get(ActiveGroup, seed.group_a_id).end_time is not None
    assert db.get(ActiveGroup, seed.group_b_id).end_time is None
    assert db.query(Visit).one().exit_time is not None
    assert db.query(GroupSupervisor).one().end_date is not None


def test_recent_checkin_keeps_group_running(db, seed):
    _go_quiet(db, seed.group_a_id, minutes=30)

    report = ActiveGroupService(db).end_idle_groups(timedelta(minutes=60)).data

    assert report.groups_found == 0
    assert db.get(ActiveGroup, seed.group_a_id).end_time is None


def test_group_without_checkins_counts_from_its_start(db, seed):
    group = db.get(ActiveGroup, seed.group_b_id)
    group.start_time = now_utc() - timedelta(hours=3)
    group.last_activity = None
    db.commit()

    report = ActiveGroupService(db).end_idle_groups(timedelta(minutes=60)).data

    assert report.groups_ended == 1
    db.expire_all()
    assert db.get(ActiveGroup, seed.group_b_id).end_time is not None


def test_group_that_cannot_be_ended_is_skipped(db, seed, monkeypatch):
    service = ActiveGroupService(db)
    ended = db.get(ActiveGroup, seed.ended_group_id)
    group_a = db.get(ActiveGroup, seed.group_a_id)
    # The ended group was still running when the sweep looked it up
    monkeypatch.setattr(service.groups, "find_running", lambda idle_before=None: [ended, group_a])

    report = service.end_idle_groups(timedelta(minutes=60)).data

    assert report.success is False
    assert report.groups_found == 2
    assert report.groups_ended == 1
    assert [error["active_group_id"] for error in report.errors] == [seed.ended_group_id]
    db.expire_all()
    assert db.get(ActiveGroup, seed.group_a_id).end_time is not None


def test_end_all_groups_ends_every_running_group(db, seed):
    report = ActiveGroupService(db).end_all_groups().data

    assert report.success is True
    assert report.groups_ended == 2
    db.expire_all()
    assert db.query(ActiveGroup).filter(ActiveGroup.end_time.is_(None)).count() == 0


def test_ending_group_closes_supervision_with_future_end_date(db, seed):
    supervision = db.query(GroupSupervisor).one()
    supervision.end_date = now_utc() + timedelta(hours=2)
    db.commit()

    result = ActiveGroupService(db).end_group(seed.group_a_id)

    assert result
    db.expire_all()
    closed = db.query(GroupSupervisor).one()
    assert closed.end_date <= now_utc()
    assert closed.is_active() is False


def test_supervision_ending_later_can_be_ended_now(db, seed):
    supervision = db.query(GroupSupervisor).one()
    supervision.end_date = now_utc() + timedelta(hours=2)
    db.commit()

    result = ActiveGroupService(db).end_supervision(supervision.id)

    assert result
    assert result.data.end_date <= now_utc()


def test_cleanup_helpers_use_their_own_session(seed, session_factory, db):
    _go_quiet(db, seed.group_a_id, minutes=120)

    idle = run_idle_group_cleanup(session_factory, timeout_minutes=60)
    assert idle["success"] is True
    assert idle["groups_ended"] == 1
    assert idle["message"] == "Idle groups ended"

    daily = run_daily_group_end(session_factory)
    assert daily["groups_ended"] == 1


def test_beat_schedule_runs_cleanup_jobs():
    schedule = _build_beat_schedule()

    assert schedule["end-idle-groups"]["task"] == "ogs.tasks.end_idle_groups"
    assert schedule["end-idle-groups"]["schedule"] == 15 * 60
    daily = schedule["end-daily-groups"]["schedule"]
    assert daily.hour == {18}
    assert daily.minute == {0}
