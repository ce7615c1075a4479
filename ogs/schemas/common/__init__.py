from ogs.schemas.common.base import BaseSchema
from ogs.schemas.common.response import ErrorInfo, ErrorResponse, SuccessResponse

__all__ = ["BaseSchema", "ErrorInfo", "ErrorResponse", "SuccessResponse"]
