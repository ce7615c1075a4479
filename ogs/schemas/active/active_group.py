"""Schemas for active groups, supervisors and combined groups."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, computed_field

from ogs.models.base.enums import SupervisorRole
from ogs.schemas.common.base import BaseSchema

__all__ = [
    "ActiveGroupCreate",
    "ActiveGroupResponse",
    "SupervisorCreate",
    "SupervisorResponse",
    "CombinedGroupCreate",
    "CombinedGroupResponse",
    "GroupMappingCreate",
]


class ActiveGroupCreate(BaseSchema):
    activity_id: int = Field(..., gt=0)
    room_id: int = Field(..., gt=0)


class ActiveGroupResponse(BaseSchema):
    id: int
    activity_id: int
    room_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    last_activity: Optional[datetime] = None

    @computed_field
    @property
    def is_active(self) -> bool:
        return self.end_time is None


class SupervisorCreate(BaseSchema):
    active_group_id: int = Field(..., gt=0)
    staff_id: int = Field(..., gt=0)
    role: SupervisorRole = SupervisorRole.SUPERVISOR


class SupervisorResponse(BaseSchema):
    id: int
    staff_id: int
    active_group_id: int
    role: SupervisorRole
    start_date: datetime
    end_date: Optional[datetime] = None


class CombinedGroupCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CombinedGroupResponse(BaseSchema):
    id: int
    name: str
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    active_group_ids: List[int] = Field(default_factory=list)


class GroupMappingCreate(BaseSchema):
    active_group_id: int = Field(..., gt=0)
