"""
YouClinic CRM Backend - FastAPI Application Entry Point

Lead pipeline, patient transfers, proforma invoices, calendar and activity
log for clinic sales teams.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .core.config import settings
from .core.database import engine, init_db
from .core.exceptions import CRMError
from .core.logging_config import configure_logging
from .api import (
    health_router,
    auth_router,
    users_router,
    leads_router,
    files_router,
    transfers_router,
    logs_router,
    calendar_router,
    proforma_router,
    proforma_link_router,
    webhooks_router,
)
from . import services  # noqa: F401  (registers the status change flush hook)


logger = logging.getLogger(__name__)


# =============================================================================
# Performance Monitoring Middleware
# =============================================================================

class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track API response times and log slow requests.

    Adds X-Response-Time header to all responses.
    """

    SLOW_REQUEST_THRESHOLD_MS = 500

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time_ms = (time.time() - start_time) * 1000

        response.headers["X-Response-Time"] = f"{process_time_ms:.2f}ms"

        if process_time_ms > self.SLOW_REQUEST_THRESHOLD_MS:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {process_time_ms:.2f}ms"
            )
        return response


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Configures logging, refuses to start in production with the dev
    secret, and optionally creates missing tables.
    """
    configure_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")

    if settings.secret_key == "dev-secret-key-change-in-production":
        if settings.is_production:
            raise RuntimeError("SECRET_KEY still uses the development default; refusing to start")
        logger.warning("Dev-default SECRET_KEY in use. This MUST be changed for production.")

    if settings.auto_create_tables:
        init_db()
        logger.info("Database tables ensured")

    yield

    logger.info("Shutting down...")
    engine.dispose()


# =============================================================================
# Application Factory
# =============================================================================

def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Patient and lead CRM API for clinic sales teams.",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(PerformanceMonitoringMiddleware)

    cors_origins = settings.cors_origins_list
    allow_all = "*" in cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else cors_origins,
        allow_credentials=not allow_all,  # credentials not compatible with wildcard
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Response-Time"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(leads_router)
    app.include_router(files_router)
    app.include_router(transfers_router)
    app.include_router(logs_router)
    app.include_router(calendar_router)
    app.include_router(proforma_router)
    app.include_router(proforma_link_router)
    app.include_router(webhooks_router)

    register_exception_handlers(app)
    return app


# =============================================================================
# Exception Handlers
# =============================================================================

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CRMError)
    async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
        """Render domain errors as the standard error body."""
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.error, "message": exc.message},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log unhandled exceptions and return a generic message."""
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "internal_error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )


app = create_application()


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict:
    """
    Root endpoint returning API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs" if settings.is_development else "disabled",
    }


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "youclinic.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
