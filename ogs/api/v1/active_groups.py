"""Active group endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from ogs.api import deps
from ogs.core.security import Permission, Principal
from ogs.schemas.active import ActiveGroupCreate, ActiveGroupResponse, SupervisorResponse, VisitResponse
from ogs.schemas.common import SuccessResponse
from ogs.services.active import ActiveGroupService

router = APIRouter(prefix="/active-groups", tags=["Active Groups"])


@router.get("", response_model=SuccessResponse[List[ActiveGroupResponse]])
def list_active_groups(
    active_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).list_groups(active_only=active_only, skip=skip, limit=limit)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Active groups retrieved")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse[ActiveGroupResponse])
def create_active_group(
    payload: ActiveGroupCreate,
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_CREATE.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).create_group(payload.activity_id, payload.room_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.get("/{active_group_id}", response_model=SuccessResponse[ActiveGroupResponse])
def get_active_group(
    active_group_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).get_group(active_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Active group retrieved")


@router.post("/{active_group_id}/end", response_model=SuccessResponse[ActiveGroupResponse])
def end_active_group(
    active_group_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_UPDATE.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).end_group(active_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.get("/{active_group_id}/visits", response_model=SuccessResponse[List[VisitResponse]])
def list_group_visits(
    active_group_id: int = Path(..., gt=0),
    active_only: bool = Query(False),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).list_visits(active_group_id, active_only=active_only)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Visits retrieved")


@router.get("/{active_group_id}/supervisors", response_model=SuccessResponse[List[SupervisorResponse]])
def list_group_supervisors(
    active_group_id: int = Path(..., gt=0),
    current_only: bool = Query(False),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = ActiveGroupService(db).list_supervisors(active_group_id, current_only=current_only)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Supervisors retrieved")
