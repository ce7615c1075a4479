from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ogs.api.v1.router import router as api_v1_router
from ogs.core.config import settings
from ogs.core.error_handlers import register_exception_handlers
from ogs.core.logging import get_logger
from ogs.core.middleware import register_middlewares
from ogs.db.init_db import init_db

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under API_V1_PREFIX.
    """
    app = FastAPI(
        title=settings.api.API_TITLE,
        description=settings.api.API_DESCRIPTION,
        debug=settings.DEBUG,
        version=settings.api.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.CORS_ORIGINS,
        allow_credentials=settings.security.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID, timing and security headers
    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.api.API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "service": settings.SERVICE_NAME, "environment": settings.ENVIRONMENT}

    # Production schemas are managed outside the application
    @app.on_event("startup")
    async def on_startup() -> None:
        if not settings.is_production:
            init_db()
        logger.info("Application started", environment=settings.ENVIRONMENT)

    return app


app = create_app()
