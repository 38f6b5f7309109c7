# drive_service/main.py
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

import pydantic
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .errors import (
    DriveError,
    error_body,
    handle_broad_exceptions,
    handle_drive_error,
    handle_validation_errors,
)
from .monitoring.metrics import metrics_collector
from .services.storage import StorageEngine

# Routers (these already have their own prefixes inside each module)
from .routers import files, folders, storage, upload, user

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def seed_demo_user(engine: StorageEngine, settings: Settings) -> None:
    """Make sure the implicit demo account exists"""
    if engine.get_user_by_username(settings.DEMO_USERNAME) is None:
        engine.create_user(settings.DEMO_USERNAME, settings.DEMO_PASSWORD)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    logger.info("🚀 Starting %s...", app.state.settings.APP_NAME)
    seed_demo_user(app.state.storage, app.state.settings)
    logger.info("✅ Application startup complete")
    yield
    logger.info("👋 Shutting down %s", app.state.settings.APP_NAME)


async def log_api_requests(request: Request, call_next):
    """One line per /api request: method, path, status and duration"""
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %d in %.0fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = f"The path {request.url.path} was not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


def create_app(settings: Optional[Settings] = None, engine: Optional[StorageEngine] = None) -> FastAPI:
    """Create a FastAPI application around one storage engine.

    Passing an engine lets tests start from an isolated, pre-populated store.
    """
    settings = settings or default_settings
    engine = engine or StorageEngine(default_storage_limit=settings.DEFAULT_STORAGE_LIMIT)
    # The demo user must exist even when the lifespan does not run
    seed_demo_user(engine, settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Personal cloud drive: folders, files, previews and a per-user quota",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.storage = engine

    if settings.METRICS_ENABLED:
        # Instrument Prometheus metrics (also exposes /metrics)
        metrics_collector.instrument_app(app, settings.VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(user.router)
    app.include_router(files.router)
    app.include_router(upload.router)
    app.include_router(folders.router)
    app.include_router(storage.router)

    app.add_exception_handler(DriveError, handle_drive_error)
    app.add_exception_handler(RequestValidationError, handle_validation_errors)
    app.add_exception_handler(pydantic.ValidationError, handle_validation_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.middleware("http")(log_api_requests)
    app.middleware("http")(handle_broad_exceptions)

    @app.get("/api/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "environment": os.getenv("ENVIRONMENT", "development"),
        }

    @app.get("/api/version", tags=["Info"])
    async def version_info():
        """Get service version information"""
        return {"service": settings.APP_NAME, "version": settings.VERSION}

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


# Run for local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "drive_service.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 5000)),
        reload=True,
        log_level="info",
        access_log=True,
    )
