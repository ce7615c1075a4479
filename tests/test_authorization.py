import pytest

from ogs.core.exceptions import AuthorizationError, ErrorCode, RepositoryError
from ogs.core.utils import now_utc
from ogs.models import ActiveGroup, GroupSupervisor, Staff, Student
from ogs.services.active import (
    AccessAction,
    AccessRequest,
    AuthorizationResolver,
    AuthorizationRule,
    RuleOutcome,
)


class FixedRule(AuthorizationRule):
    def __init__(self, name, outcome):
        self.name = name
        self.outcome = outcome
        self.calls = 0

    def evaluate(self, request):
        self.calls += 1
        return self.outcome


class BrokenRule(AuthorizationRule):
    name = "broken"

    def evaluate(self, request):
        raise RepositoryError("connection lost")


def _request(db, seed, action=AccessAction.CHECKOUT, target_group=None):
    return AccessRequest(
        staff=db.get(Staff, seed.outsider_staff_id),
        student=db.get(Student, seed.student_id),
        action=action,
        target_group=target_group,
    )


def test_resolve_staff_follows_account_to_staff(db, seed):
    staff = AuthorizationResolver(db).resolve_staff(seed.supervisor_account_id)
    assert staff.id == seed.supervisor_staff_id


def test_resolve_staff_rejects_accounts_without_staff(db, seed):
    with pytest.raises(AuthorizationError) as exc_info:
        AuthorizationResolver(db).resolve_staff(seed.parent_account_id)

    assert exc_info.value.error_code is ErrorCode.NOT_STAFF
    assert exc_info.value.status_code == 403


def test_first_conclusive_rule_wins(db, seed):
    first = FixedRule("first", RuleOutcome.INCONCLUSIVE)
    second = FixedRule("second", RuleOutcome.ALLOW)
    third = FixedRule("third", RuleOutcome.DENY)

    decision = AuthorizationResolver(db, rules=[first, second, third]).evaluate(_request(db, seed))

    assert decision.allowed is True
    assert decision.rule == "second"
    assert decision.evaluated == ["first", "second"]
    assert third.calls == 0


def test_deny_stops_the_chain(db, seed):
    deny = FixedRule("deny", RuleOutcome.DENY)
    allow = FixedRule("allow", RuleOutcome.ALLOW)

    decision = AuthorizationResolver(db, rules=[deny, allow]).evaluate(_request(db, seed))

    assert decision.allowed is False
    assert allow.calls == 0


def test_no_opinion_means_deny(db, seed):
    decision = AuthorizationResolver(db, rules=[FixedRule("a", RuleOutcome.INCONCLUSIVE)]).evaluate(
        _request(db, seed)
    )
    assert decision.allowed is False
    assert decision.rule is None


def test_rule_error_fails_closed(db, seed):
    allow = FixedRule("allow", RuleOutcome.ALLOW)

    decision = AuthorizationResolver(db, rules=[BrokenRule(), allow]).evaluate(_request(db, seed))

    assert decision.allowed is False
    assert decision.rule == "broken"
    assert allow.calls == 0


def test_room_supervisor_may_check_out_visiting_student(db, seed, place_student):
    place_student(seed.student_id, seed.group_a_id, seed.supervisor_staff_id)
    resolver = AuthorizationResolver(db)
    staff = db.get(Staff, seed.supervisor_staff_id)
    student = db.get(Student, seed.student_id)

    decision = resolver.ensure_authorized(staff, student, AccessAction.CHECKOUT)

    assert decision.rule == "room_supervisor"


def test_ended_supervision_does_not_authorize(db, seed, place_student):
    place_student(seed.other_student_id, seed.group_a_id, seed.supervisor_staff_id)
    assignment = db.query(GroupSupervisor).filter_by(staff_id=seed.supervisor_staff_id).one()
    assignment.end_date = now_utc()
    db.commit()

    with pytest.raises(AuthorizationError):
        AuthorizationResolver(db).ensure_authorized(
            db.get(Staff, seed.supervisor_staff_id),
            db.get(Student, seed.other_student_id),
            AccessAction.CHECKOUT,
        )


def test_home_group_teacher_needs_no_visit(db, seed):
    decision = AuthorizationResolver(db).ensure_authorized(
        db.get(Staff, seed.teacher_staff_id),
        db.get(Student, seed.student_id),
        AccessAction.CHECKOUT,
    )
    assert decision.rule == "home_group_teacher"


def test_teacher_of_another_group_is_denied(db, seed):
    with pytest.raises(AuthorizationError) as exc_info:
        AuthorizationResolver(db).ensure_authorized(
            db.get(Staff, seed.teacher_staff_id),
            db.get(Student, seed.other_student_id),
            AccessAction.CHECKOUT,
        )
    assert exc_info.value.message == "You are not authorized to checkout this student"


def test_target_group_supervisor_only_applies_to_checkin(db, seed):
    group_a = db.get(ActiveGroup, seed.group_a_id)
    staff = db.get(Staff, seed.supervisor_staff_id)
    student = db.get(Student, seed.other_student_id)
    resolver = AuthorizationResolver(db)

    assert resolver.evaluate(AccessRequest(staff, student, AccessAction.CHECKIN, group_a)).allowed
    assert not resolver.evaluate(AccessRequest(staff, student, AccessAction.CHECKOUT, group_a)).allowed


def test_room_supervisor_is_denied_for_student_in_another_room(db, seed, place_student):
    place_student(seed.other_student_id, seed.group_b_id, seed.teacher_staff_id)

    with pytest.raises(AuthorizationError):
        AuthorizationResolver(db).ensure_authorized(
            db.get(Staff, seed.supervisor_staff_id),
            db.get(Student, seed.other_student_id),
            AccessAction.CHECKOUT,
        )


def test_room_supervisor_who_is_also_home_teacher_may_check_out_elsewhere(db, seed, place_student):
    db.add(GroupSupervisor(staff_id=seed.teacher_staff_id, active_group_id=seed.group_a_id, start_date=now_utc()))
    db.commit()
    place_student(seed.student_id, seed.group_b_id, seed.supervisor_staff_id)

    decision = AuthorizationResolver(db).ensure_authorized(
        db.get(Staff, seed.teacher_staff_id),
        db.get(Student, seed.student_id),
        AccessAction.CHECKOUT,
    )

    assert decision.rule == "home_group_teacher"
