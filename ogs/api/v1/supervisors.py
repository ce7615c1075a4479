"""Supervisor assignment endpoints."""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from ogs.api import deps
from ogs.core.security import Permission, Principal
from ogs.models.base.enums import SupervisorRole
from ogs.schemas.active import SupervisorCreate, SupervisorResponse
from ogs.schemas.common import SuccessResponse
from ogs.services.active import ActiveGroupService

router = APIRouter(prefix="/supervisors", tags=["Supervisors"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse[SupervisorResponse])
def assign_supervisor(
    payload: SupervisorCreate,
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_ASSIGN.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).assign_supervisor(
        payload.active_group_id,
        payload.staff_id,
        SupervisorRole(payload.role),
    )
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.post("/{supervisor_id}/end", response_model=SuccessResponse[SupervisorResponse])
def end_supervision(
    supervisor_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_ASSIGN.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).end_supervision(supervisor_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)
