"""
Dependencies and helpers shared by the API routers.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from ogs.api import deps

    router = APIRouter()

    @router.get("/me")
    def read_me(principal = Depends(deps.require_permission("attendance:read"))):
        return principal
"""

from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ogs.core.dependencies import get_current_principal, require_permission
from ogs.core.error_handlers import error_body
from ogs.core.security import Principal
from ogs.db.session import get_db
from ogs.services.base import ServiceResult

__all__ = [
    "get_db",
    "get_current_principal",
    "require_permission",
    "Principal",
    "error_response",
    "success_body",
]


def error_response(result: ServiceResult) -> JSONResponse:
    """Render a failed service result in the error envelope."""
    error = result.error
    payload = error.to_dict()
    return JSONResponse(
        status_code=error.http_status,
        content=jsonable_encoder(error_body(payload["message"], payload["code"], payload["details"])),
    )


def success_body(result: ServiceResult, data: Any = None, default_message: str = "OK") -> Dict[str, Any]:
    return {
        "status": "success",
        "message": result.message or default_message,
        "data": data if data is not None else result.data,
    }
