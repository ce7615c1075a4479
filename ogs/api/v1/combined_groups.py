"""Combined group endpoints."""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from ogs.api import deps
from ogs.core.security import Permission, Principal
from ogs.schemas.active import CombinedGroupCreate, CombinedGroupResponse, GroupMappingCreate
from ogs.schemas.common import SuccessResponse
from ogs.services.active import CombinedGroupService

router = APIRouter(prefix="/combined-groups", tags=["Combined Groups"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse[CombinedGroupResponse])
def create_combined_group(
    payload: CombinedGroupCreate,
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_CREATE.value)),
    db: Session = Depends(deps.get_db),
):
    result = CombinedGroupService(db).create(payload.name, payload.description)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.get("/{combined_group_id}", response_model=SuccessResponse[CombinedGroupResponse])
def get_combined_group(
    combined_group_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_READ.value)),
    db: Session = Depends(deps.get_db),
):
    result = CombinedGroupService(db).get(combined_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result, default_message="Combined group retrieved")


@router.post("/{combined_group_id}/end", response_model=SuccessResponse[CombinedGroupResponse])
def end_combined_group(
    combined_group_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_UPDATE.value)),
    db: Session = Depends(deps.get_db),
):
    result = CombinedGroupService(db).end(combined_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.post("/{combined_group_id}/groups", response_model=SuccessResponse[CombinedGroupResponse])
def add_group_to_combined_group(
    payload: GroupMappingCreate,
    combined_group_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_UPDATE.value)),
    db: Session = Depends(deps.get_db),
):
    result = CombinedGroupService(db).add_group(combined_group_id, payload.active_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)


@router.delete("/{combined_group_id}/groups/{active_group_id}", response_model=SuccessResponse[CombinedGroupResponse])
def remove_group_from_combined_group(
    combined_group_id: int = Path(..., gt=0),
    active_group_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.GROUP_UPDATE.value)),
    db: Session = Depends(deps.get_db),
):
    result = CombinedGroupService(db).remove_group(combined_group_id, active_group_id)
    if not result:
        return deps.error_response(result)
    return deps.success_body(result)
