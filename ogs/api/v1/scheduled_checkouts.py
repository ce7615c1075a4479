"""
Scheduled checkout endpoints.

``POST /scheduled-checkouts/process`` runs the processor on demand; the same
processor runs periodically from the task worker.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ogs.api import deps
from ogs.core.security import Permission, Principal
from ogs.schemas.active import ProcessingResponse, ScheduledCheckoutCreate, ScheduledCheckoutResponse
from ogs.schemas.common import SuccessResponse
from ogs.services.active import ScheduledCheckoutService

router = APIRouter(prefix="/scheduled-checkouts", tags=["Scheduled Checkouts"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[ScheduledCheckoutResponse],
)
def create_scheduled_checkout(
    payload: ScheduledCheckoutCreate,
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_CHECKOUT.value)),
    db: Session = Depends(deps.get_db),
):
    result = ScheduledCheckoutService(db).create(
        principal.account_id,
        payload.student_id,
        payload.scheduled_for,
        payload.reason,
    )
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.post(
    "/process",
    response_model=ProcessingResponse,
    responses={206: {"description": "Some checkouts failed"}, 500: {"description": "All checkouts failed"}},
)
def process_scheduled_checkouts(
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_CHECKOUT.value)),
    db: Session = Depends(deps.get_db),
):
    result = ScheduledCheckoutService(db).process_due()
    if not result:
        return deps.error_response(result)

    report = result.data
    body = report.to_dict()
    body["message"] = result.message

    if report.success:
        status_code = status.HTTP_200_OK
    elif report.partial:
        status_code = status.HTTP_206_PARTIAL_CONTENT
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@router.get("/student/{student_id}", response_model=SuccessResponse[List[ScheduledCheckoutResponse]])
def list_student_scheduled_checkouts(
    student_id: int = Path(..., gt=0),
    pending_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ScheduledCheckoutService(db).list_for_student(
        student_id, pending_only=pending_only, skip=skip, limit=limit
    )
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Scheduled checkouts retrieved")


@router.get("/{scheduled_checkout_id}", response_model=SuccessResponse[ScheduledCheckoutResponse])
def get_scheduled_checkout(
    scheduled_checkout_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ScheduledCheckoutService(db).get(scheduled_checkout_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Scheduled checkout retrieved")


@router.delete("/{scheduled_checkout_id}", response_model=SuccessResponse[ScheduledCheckoutResponse])
def cancel_scheduled_checkout(
    scheduled_checkout_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_CHECKOUT.value)),
    db: Session = Depends(deps.get_db),
):
    result = ScheduledCheckoutService(db).cancel(principal.account_id, scheduled_checkout_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)
