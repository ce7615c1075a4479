"""Daily attendance status."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from ogs.api import deps
from ogs.core.security import Permission, Principal
from ogs.schemas.active import AttendanceStatusData
from ogs.schemas.common import SuccessResponse
from ogs.services.active import AttendanceStateService

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.get("/student/{student_id}/status", response_model=SuccessResponse[AttendanceStatusData])
def attendance_status(
    student_id: int = Path(..., gt=0),
    principal: Principal = Depends(deps.require_permission(Permission.ATTENDANCE_READ.value)),
    db: Session = Depends(deps.get_db),
):
    snapshot = AttendanceStateService(db).get_student_status(student_id)
    return SuccessResponse.create(message="Attendance status retrieved", data=snapshot.to_dict())
