from datetime import timedelta

from ogs.core.security import Permission, create_access_token
from ogs.core.utils import now_utc
from ogs.models import Attendance, GroupSupervisor, Visit

from tests.conftest import make_headers

API = "/api/v1"


def _checkin(client, account_id, student_id, group_id, headers=None):
    return client.post(
        f"{API}/visits/student/{student_id}/checkin",
        json={"active_group_id": group_id},
        headers=headers or make_headers(account_id),
    )


def test_checkin_returns_visit_and_attendance(client, seed):
    res = _checkin(client, seed.supervisor_account_id, seed.other_student_id, seed.group_a_id)

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["status"] == "success"
    data = body["data"]
    assert data["student_id"] == seed.other_student_id
    assert data["action"] == "checked_in"
    assert data["active_group_id"] == seed.group_a_id
    assert data["room_id"] == seed.room_a_id
    assert data["attendance_status"] == "checked_in"
    assert data["checked_in_by"] == "Anna Berger"
    assert data["visit_id"] > 0
    assert "X-Request-ID" in res.headers


def test_checkout_returns_attendance(client, db, seed, place_student):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)

    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkout",
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 200, res.text
    data = res.json()["data"]
    assert data["action"] == "checked_out"
    assert data["attendance_status"] == "checked_out"
    assert data["checked_out_by"] == "Tom Keller"
    assert data["check_out_time"] is not None

    db.expire_all()
    assert db.query(Visit).filter(Visit.exit_time.is_(None)).count() == 0


def test_checkout_without_visit_succeeds(client, seed, place_student):
    place_student(seed.student_id, None, seed.supervisor_staff_id, with_visit=False)

    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkout",
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 200, res.text


def test_unrelated_staff_gets_403(client, db, seed):
    res = _checkin(client, seed.outsider_account_id, seed.student_id, seed.group_a_id)

    assert res.status_code == 403
    body = res.json()
    assert body["status"] == "error"
    assert body["error"]["code"] == "AUTHORIZATION_FAILED"
    assert db.query(Attendance).count() == 0


def test_unrelated_staff_checkout_gets_403(client, db, seed, place_student):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)

    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkout",
        headers=make_headers(seed.outsider_account_id),
    )

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "AUTHORIZATION_FAILED"
    db.expire_all()
    assert db.query(Attendance).one().check_out_time is None
    assert db.query(Visit).one().exit_time is None


def test_supervisor_of_another_room_checkout_gets_403(client, seed, place_student):
    place_student(seed.other_student_id, seed.group_b_id, seed.teacher_staff_id)

    res = client.post(
        f"{API}/visits/student/{seed.other_student_id}/checkout",
        headers=make_headers(seed.supervisor_account_id),
    )

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "AUTHORIZATION_FAILED"


def test_home_teacher_supervising_another_room_may_check_out(client, db, seed, place_student):
    db.add(GroupSupervisor(staff_id=seed.teacher_staff_id, active_group_id=seed.group_a_id, start_date=now_utc()))
    db.commit()
    place_student(seed.student_id, seed.group_b_id, seed.supervisor_staff_id)

    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkout",
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 200, res.text
    assert res.json()["data"]["checked_out_by"] == "Tom Keller"


def test_non_staff_account_gets_403(client, seed):
    res = _checkin(client, seed.parent_account_id, seed.student_id, seed.group_a_id)

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "NOT_STAFF"


def test_checkin_into_ended_group_gets_409(client, seed):
    res = _checkin(client, seed.teacher_account_id, seed.student_id, seed.ended_group_id)

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "GROUP_ENDED"


def test_double_checkin_gets_409(client, seed):
    assert _checkin(client, seed.teacher_account_id, seed.student_id, seed.group_a_id).status_code == 200

    res = _checkin(client, seed.teacher_account_id, seed.student_id, seed.group_b_id)

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "STUDENT_ALREADY_CHECKED_IN"


def test_checkout_of_absent_student_gets_404(client, seed):
    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkout",
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "STUDENT_NOT_CHECKED_IN"


def test_unknown_student_gets_404(client, seed):
    res = _checkin(client, seed.teacher_account_id, 9999, seed.group_a_id)
    assert res.status_code == 404


def test_missing_token_gets_401(client, seed):
    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkin",
        json={"active_group_id": seed.group_a_id},
    )

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_FAILED"


def test_expired_token_gets_401(client, seed):
    token = create_access_token(
        seed.teacher_account_id,
        permissions=[Permission.ATTENDANCE_CHECKIN.value],
        expires_delta=timedelta(minutes=-5),
    )

    res = _checkin(
        client, seed.teacher_account_id, seed.student_id, seed.group_a_id,
        headers={"Authorization": f"Bearer {token}"},
    )

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "TOKEN_EXPIRED"


def test_garbage_token_gets_401(client, seed):
    res = _checkin(
        client, seed.teacher_account_id, seed.student_id, seed.group_a_id,
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert res.status_code == 401


def test_missing_permission_gets_403(client, seed):
    headers = make_headers(seed.teacher_account_id, permissions=[Permission.ATTENDANCE_READ.value])

    res = _checkin(client, seed.teacher_account_id, seed.student_id, seed.group_a_id, headers=headers)

    assert res.status_code == 403
    assert res.json()["error"]["details"]["required_permission"] == "attendance:checkin"


def test_admin_permission_grants_everything(client, seed):
    headers = make_headers(seed.teacher_account_id, permissions=[Permission.ADMIN.value])

    res = _checkin(client, seed.teacher_account_id, seed.student_id, seed.group_a_id, headers=headers)

    assert res.status_code == 200, res.text


def test_malformed_student_id_gets_400(client, seed):
    res = client.post(
        f"{API}/visits/student/abc/checkin",
        json={"active_group_id": seed.group_a_id},
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_missing_body_gets_400(client, seed):
    res = client.post(
        f"{API}/visits/student/{seed.student_id}/checkin",
        headers=make_headers(seed.teacher_account_id),
    )
    assert res.status_code == 400


def test_current_visit_and_end_visit(client, seed):
    _checkin(client, seed.teacher_account_id, seed.student_id, seed.group_a_id)
    headers = make_headers(seed.teacher_account_id)

    current = client.get(f"{API}/visits/student/{seed.student_id}/current", headers=headers)
    assert current.status_code == 200
    visit = current.json()["data"]
    assert visit["active_group_id"] == seed.group_a_id
    assert visit["is_active"] is True

    ended = client.post(f"{API}/visits/{visit['id']}/end", headers=headers)
    assert ended.status_code == 200
    assert ended.json()["data"]["is_active"] is False

    again = client.post(f"{API}/visits/{visit['id']}/end", headers=headers)
    assert again.status_code == 409

    # The day's attendance is unaffected by ending the visit
    status = client.get(f"{API}/attendance/student/{seed.student_id}/status", headers=headers)
    assert status.json()["data"]["status"] == "checked_in"


def test_attendance_status_for_absent_student(client, seed):
    res = client.get(
        f"{API}/attendance/student/{seed.student_id}/status",
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["status"] == "not_checked_in"
    assert data["attendance_id"] is None


def test_attendance_status_for_unknown_student_gets_404(client, seed):
    res = client.get(
        f"{API}/attendance/student/99999/status",
        headers=make_headers(seed.teacher_account_id),
    )

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
