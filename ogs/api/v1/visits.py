"""Visit endpoints: checkin, checkout and open visits."""

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.orm import Session

from ogs.api import deps
from ogs.core.security import Permission, Principal
from ogs.schemas.active import CheckinData, CheckinRequest, CheckoutData, VisitResponse
from ogs.schemas.common import SuccessResponse
from ogs.services.active import ActiveGroupService, CheckinService, CheckoutService

router = APIRouter(prefix="/visits", tags=["Visits"])


@router.post("/student/{student_id}/checkin", response_model=SuccessResponse[CheckinData])
def checkin_student(
    student_id: int = Path(..., gt=0),
    payload: CheckinRequest = Body(...),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_CHECKIN.value)),
    db: Session = Depends(deps.get_db),
):
    result = CheckinService(db).checkin(principal.account_id, student_id, payload.active_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.post("/student/{student_id}/checkout", response_model=SuccessResponse[CheckoutData])
def checkout_student(
    student_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_CHECKOUT.value)),
    db: Session = Depends(deps.get_db),
):
    result = CheckoutService(db).checkout(principal.account_id, student_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.get("/student/{student_id}/current", response_model=SuccessResponse[VisitResponse])
def current_visit(
    student_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).get_current_visit(student_id)
    if not result:
        return deps.error_response(result)
    message = "Student has an active visit" if result.data else "Student has no active visit"
    return {"status": "success", "message": message, "data": result.data}


@router.post("/{visit_id}/end", response_model=SuccessResponse[VisitResponse])
def end_visit(
    visit_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_CHECKOUT.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).end_visit(visit_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)
