"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the attendance service
"""
from fastapi import APIRouter

from ogs.api.v1 import (
    active_groups,
    attendance,
    combined_groups,
    scheduled_checkouts,
    supervisors,
    visits,
)
from ogs.core.logging import get_logger
from ogs.schemas.common import ErrorResponse

logger = get_logger(__name__)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        403: {"model": ErrorResponse, "description": "Forbidden"},
        404: {"model": ErrorResponse, "description": "Not Found"},
        409: {"model": ErrorResponse, "description": "Conflict"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    }
)

for module in (visits, attendance, scheduled_checkouts, active_groups, supervisors, combined_groups):
    router.include_router(module.router)

logger.debug("API v1 routers registered", route_count=len(router.routes))

__all__ = ["router"]
