from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.core.errors import WorkshopError
from src.core.logging import configure_logging, correlation_id_var
from src.core.settings import AppSettings, get_app_settings
from src.db.run_migrations import main as run_alembic
from src.db.session import Database
from src.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

from src.api.routes.work_orders import router as work_orders_router

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probes."},
    {"name": "Work Orders", "description": "Work orders with parts, labor, stock and worker workload."},
]


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with correlation_id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)

    response.headers["X-Correlation-ID"] = corr
    return response


async def workshop_exception_handler(request: Request, exc: WorkshopError):
    """Render domain failures (not found, invalid argument, conflict, storage) in the error envelope."""
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    else:
        logger.info("Request rejected (%s): %s", exc.kind, exc.message)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.kind,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[AppSettings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters:
        settings: application settings; read from the environment when omitted
        database: database handle shared by all requests; built from the
            database settings when omitted (the engine is created lazily)
    Returns:
        The configured FastAPI app with the /api/v1 routes mounted.
    """
    settings = settings or get_app_settings()
    database = database or Database()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.database = database

    # Browsers reject credentials with a wildcard origin
    cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS and settings.CORS_ORIGINS != ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(WorkshopError, workshop_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    async def on_startup() -> None:
        """
        Run migrations on service startup.

        Alembic drives its own event loop, so the upgrade runs in a worker thread.
        """
        if settings.RUN_MIGRATIONS_ON_STARTUP:
            try:
                logger.info("Running Alembic migrations: upgrade head")
                await asyncio.to_thread(run_alembic, ["upgrade", "head"], database.url)
                logger.info("Migrations completed.")
            except Exception as exc:
                logger.exception("Migration step failed: %s", exc)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await database.dispose()

    api_v1 = APIRouter(prefix="/api/v1")

    # PUBLIC_INTERFACE
    @api_v1.get(
        "/health",
        response_model=MessageResponse,
        summary="Health Check",
        tags=["Health"],
    )
    def health_check() -> MessageResponse:
        """
        Basic liveness health check endpoint.

        Returns:
            MessageResponse: Simple confirmation that the service is running.
        """
        return MessageResponse(message="Healthy")

    api_v1.include_router(work_orders_router)
    app.include_router(api_v1)
    return app


app = create_app()
