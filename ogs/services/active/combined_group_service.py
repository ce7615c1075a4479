"""Combined groups bundle several active groups under one name."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import BaseAppException, ConflictError, ErrorCode, ResourceNotFoundError
from ogs.core.utils import now_utc
from ogs.models.active import CombinedGroup, GroupMapping
from ogs.repositories.active import ActiveGroupRepository, CombinedGroupRepository
from ogs.services.base import BaseService, ServiceResult


class CombinedGroupService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.combined = CombinedGroupRepository(db_session)
        self.groups = ActiveGroupRepository(db_session)

    def create(self, name: str, description: Optional[str] = None) -> ServiceResult[CombinedGroup]:
        try:
            with self.transaction():
                combined = self.combined.create(
                    CombinedGroup(name=name, description=description, start_time=now_utc())
                )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, "create_combined_group")
        return ServiceResult.success(combined, message="Combined group created successfully")

    def get(self, combined_group_id: int) -> ServiceResult[CombinedGroup]:
        try:
            combined = self.combined.find_by_id(combined_group_id)
        except BaseAppException as e:
            return self._handle_exception(e, "get_combined_group", combined_group_id)
        if combined is None:
            return ServiceResult.not_found("Combined group", combined_group_id)
        return ServiceResult.success(combined)

    def add_group(self, combined_group_id: int, active_group_id: int) -> ServiceResult[CombinedGroup]:
        operation = "add_group_to_combined_group"
        try:
            combined = self._get_open(combined_group_id)
            group = self.groups.find_by_id(active_group_id)
            if group is None:
                raise ResourceNotFoundError("Active group", active_group_id)
            if not group.is_active():
                raise ConflictError("Active group has ended", error_code=ErrorCode.GROUP_ENDED)
            if self.combined.find_mapping(combined_group_id, active_group_id) is not None:
                raise ConflictError("Active group is already part of this combined group")

            with self.transaction():
                combined.mappings.append(
                    GroupMapping(combined_group_id=combined_group_id, active_group_id=active_group_id)
                )
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, combined_group_id)

        return ServiceResult.success(combined, message="Group added to combined group")

    def remove_group(self, combined_group_id: int, active_group_id: int) -> ServiceResult[CombinedGroup]:
        operation = "remove_group_from_combined_group"
        try:
            combined = self._get_open(combined_group_id)
            mapping = self.combined.find_mapping(combined_group_id, active_group_id)
            if mapping is None:
                raise ResourceNotFoundError("Group mapping", active_group_id)

            with self.transaction():
                combined.mappings.remove(mapping)
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, operation, combined_group_id)

        return ServiceResult.success(combined, message="Group removed from combined group")

    def end(self, combined_group_id: int) -> ServiceResult[CombinedGroup]:
        try:
            combined = self._get_open(combined_group_id)
            with self.transaction():
                self.combined.update(combined, {"end_time": now_utc()})
        except (BaseAppException, SQLAlchemyError) as e:
            return self._handle_exception(e, "end_combined_group", combined_group_id)
        return ServiceResult.success(combined, message="Combined group ended successfully")

    def _get_open(self, combined_group_id: int) -> CombinedGroup:
        combined = self.combined.find_by_id(combined_group_id)
        if combined is None:
            raise ResourceNotFoundError("Combined group", combined_group_id)
        if not combined.is_active():
            raise ConflictError("Combined group has ended")
        return combined
