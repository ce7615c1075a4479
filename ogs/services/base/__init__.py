from ogs.services.base.base_service import BaseService
from ogs.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    HTTP_STATUS_BY_CODE,
    ServiceError,
    ServiceResult,
)

__all__ = [
    "BaseService",
    "ErrorCode",
    "ErrorSeverity",
    "HTTP_STATUS_BY_CODE",
    "ServiceError",
    "ServiceResult",
]
