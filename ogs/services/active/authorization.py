"""
Authorization for student checkin/checkout.

Staff are resolved from the authenticated account, then an ordered chain of
rules decides whether they may act on a student. Each rule either allows,
denies or has no opinion; the first rule with an opinion wins and the chain
denies when nobody allowed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ogs.core.exceptions import AuthorizationError, ErrorCode, RepositoryError
from ogs.core.logging import get_logger
from ogs.models.active import ActiveGroup, Visit
from ogs.models.users import Staff, Student
from ogs.repositories.active import GroupSupervisorRepository, VisitRepository
from ogs.repositories.users import StaffRepository, TeacherRepository

logger = get_logger(__name__)


class AccessAction(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"
    SCHEDULE_CHECKOUT = "schedule_checkout"


class RuleOutcome(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    INCONCLUSIVE = "inconclusive"


@dataclass
class AccessRequest:
    staff: Staff
    student: Student
    action: AccessAction
    target_group: Optional[ActiveGroup] = None


@dataclass
class AuthorizationDecision:
    allowed: bool
    rule: Optional[str] = None
    evaluated: List[str] = field(default_factory=list)


class AuthorizationRule:
    """One step of the chain."""

    name = "rule"

    def evaluate(self, request: AccessRequest) -> RuleOutcome:
        raise NotImplementedError


class RoomSupervisorRule(AuthorizationRule):
    """Staff supervising the active group the student is currently visiting."""

    name = "room_supervisor"

    def __init__(self, visits: VisitRepository, supervisors: GroupSupervisorRepository):
        self.visits = visits
        self.supervisors = supervisors

    def evaluate(self, request: AccessRequest) -> RuleOutcome:
        visit: Optional[Visit] = self.visits.find_active_by_student(request.student.id)
        if visit is None or not visit.active_group.is_active():
            return RuleOutcome.INCONCLUSIVE

        assignment = self.supervisors.find_open_assignment(visit.active_group_id, request.staff.id)
        return RuleOutcome.ALLOW if assignment else RuleOutcome.INCONCLUSIVE


class TargetGroupSupervisorRule(AuthorizationRule):
    """
    On checkin the student is not in any room yet, so the supervisor of the
    room being checked into may admit them.
    """

    name = "target_group_supervisor"

    def __init__(self, supervisors: GroupSupervisorRepository):
        self.supervisors = supervisors

    def evaluate(self, request: AccessRequest) -> RuleOutcome:
        group = request.target_group
        if request.action is not AccessAction.CHECKIN or group is None or not group.is_active():
            return RuleOutcome.INCONCLUSIVE

        assignment = self.supervisors.find_open_assignment(group.id, request.staff.id)
        return RuleOutcome.ALLOW if assignment else RuleOutcome.INCONCLUSIVE


class HomeGroupTeacherRule(AuthorizationRule):
    """Teachers of the student's education group."""

    name = "home_group_teacher"

    def __init__(self, teachers: TeacherRepository):
        self.teachers = teachers

    def evaluate(self, request: AccessRequest) -> RuleOutcome:
        if request.student.group_id is None:
            return RuleOutcome.INCONCLUSIVE

        teacher = self.teachers.find_by_staff_id(request.staff.id)
        if teacher is None:
            return RuleOutcome.INCONCLUSIVE

        if self.teachers.teaches_group(teacher.id, request.student.group_id):
            return RuleOutcome.ALLOW
        return RuleOutcome.INCONCLUSIVE


class AuthorizationResolver:
    """Resolves staff and runs the rule chain."""

    def __init__(self, db: Session, rules: Optional[Sequence[AuthorizationRule]] = None):
        self.staff = StaffRepository(db)
        if rules is None:
            supervisors = GroupSupervisorRepository(db)
            rules = [
                RoomSupervisorRule(VisitRepository(db), supervisors),
                TargetGroupSupervisorRule(supervisors),
                HomeGroupTeacherRule(TeacherRepository(db)),
            ]
        self.rules: List[AuthorizationRule] = list(rules)

    def resolve_staff(self, account_id: int) -> Staff:
        """
        Raises:
            AuthorizationError: The account has no person or staff record,
                or the lookup failed.
        """
        try:
            staff = self.staff.find_by_account_id(account_id)
        except RepositoryError as e:
            logger.error("Staff resolution failed", account_id=account_id, error=str(e))
            staff = None

        if staff is None:
            raise AuthorizationError(
                "Only staff members can perform this action",
                error_code=ErrorCode.NOT_STAFF,
            )
        return staff

    def evaluate(self, request: AccessRequest) -> AuthorizationDecision:
        decision = AuthorizationDecision(allowed=False)

        for rule in self.rules:
            decision.evaluated.append(rule.name)
            try:
                outcome = rule.evaluate(request)
            except RepositoryError as e:
                logger.error(
                    "Authorization rule failed; denying",
                    rule=rule.name,
                    staff_id=request.staff.id,
                    student_id=request.student.id,
                    error=str(e),
                )
                decision.rule = rule.name
                return decision

            if outcome is RuleOutcome.INCONCLUSIVE:
                continue
            decision.allowed = outcome is RuleOutcome.ALLOW
            decision.rule = rule.name
            break

        logger.info(
            "Authorization evaluated",
            action=request.action.value,
            staff_id=request.staff.id,
            student_id=request.student.id,
            allowed=decision.allowed,
            rule=decision.rule,
        )
        return decision

    def ensure_authorized(
        self,
        staff: Staff,
        student: Student,
        action: AccessAction,
        target_group: Optional[ActiveGroup] = None,
    ) -> AuthorizationDecision:
        decision = self.evaluate(AccessRequest(staff, student, action, target_group))
        if not decision.allowed:
            raise AuthorizationError(
                f"You are not authorized to {action.value.replace('_', ' ')} this student"
            )
        return decision
