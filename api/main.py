#!/usr/bin/env python3
"""
Divelog API - HTTP API layer for the dive log metrics and statistics engine.

This is the main FastAPI application. It exposes:
- Dive listing, reading and saving with derived metrics
- Stats rollups of a diver's history
- Cached reference data
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from divelog.errors import (
    DependencyError,
    DependencyTimeoutError,
    DuplicateKeyError,
    NoDataError,
    NotFoundError,
    UpdateConflictError,
    ValidationFailedError,
)
from divelog.logging_config import configure_logging, get_logger

from .dependencies import authenticate_pb
from .schemas.divelog import ValidationErrorResponse
from .settings import get_settings

# Configure unified logging format
# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")

    yield


def register_exception_handlers(app: FastAPI) -> None:
    """Translate divelog errors into HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NoDataError)
    async def no_data_handler(request: Request, exc: NoDataError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "No dives logged yet"})

    @app.exception_handler(UpdateConflictError)
    async def conflict_handler(request: Request, exc: UpdateConflictError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "expected_version": exc.expected, "current_version": exc.actual},
        )

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(ValidationFailedError)
    async def validation_handler(request: Request, exc: ValidationFailedError) -> JSONResponse:
        body = ValidationErrorResponse.from_failure(exc.failure)
        return JSONResponse(status_code=422, content=body.model_dump())

    @app.exception_handler(DependencyTimeoutError)
    async def timeout_handler(request: Request, exc: DependencyTimeoutError) -> JSONResponse:
        logger.warning(f"Dependency timeout on {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)}, headers={"Retry-After": "1"})

    @app.exception_handler(DependencyError)
    async def dependency_handler(request: Request, exc: DependencyError) -> JSONResponse:
        logger.error(f"Dependency failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=502, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Divelog API", description="Dive log metrics and statistics API", lifespan=lifespan)

    register_exception_handlers(app)

    # Load settings
    settings = get_settings()

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    # Register routers
    from .routers import dives, reference_data, stats

    app.include_router(dives.router)
    app.include_router(stats.router)
    app.include_router(reference_data.router)

    # Core endpoints (not in a router)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "divelog-api"}

    return app


# Create app instance for uvicorn
app = create_app()
