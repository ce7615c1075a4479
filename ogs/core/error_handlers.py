"""
Exception handlers rendering every failure in the API error envelope.
"""

from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import BaseAppException, ErrorCode
from .logging import get_logger

logger = get_logger(__name__)


def error_body(message: str, code: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    return {
        "status": "error",
        "message": message,
        "error": {"code": code, "details": details or {}},
    }


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.error_code.value} - {exc.message}",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors: Dict[str, Any] = {}
    for error in exc.errors():
        field_path = ".".join(str(x) for x in error["loc"])
        field_errors[field_path] = {"message": error["msg"], "type": error["type"]}

    logger.warning(
        f"Validation error: {len(field_errors)} field(s) failed validation",
        path=request.url.path,
        method=request.method,
        validation_errors=field_errors,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Request validation failed", ErrorCode.VALIDATION_ERROR.value, {"field_errors": field_errors}),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        f"Unhandled database error: {type(exc).__name__}",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Database operation failed", ErrorCode.DATABASE_ERROR.value),
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unexpected error: {exc}",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", ErrorCode.INTERNAL_ERROR.value),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
