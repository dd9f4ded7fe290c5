# PerfBoard/perfboard/main.py
# @ai-rules:
# 1. [Pattern]: Database connect failure at startup is NOT fatal -- service starts, health and store routes return 503
#    until the database comes up; the schema is then applied on the first session.
# 2. [Constraint]: SchemaBootstrapError (unreadable schema file) IS fatal -- let it escape lifespan.
# 3. [Pattern]: DATABASE_SCHEMA_PATH="" skips the SQL file and creates tables from SQLAlchemy metadata (tests use this).
# 4. [Gotcha]: The catch-all Exception handler must not leak str(exc) to clients. Log it, return a generic body.
"""
PerfBoard - FastAPI Application

Records build performance measurements and renders them as charts:
- Measurement store (PostgreSQL via SQLAlchemy asyncio)
- Ingestion and listing endpoints
- Build-time chart (PNG)
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from . import __version__
from .dependencies import get_database, set_database
from .errors import (
    SchemaBootstrapError,
    StatementError,
    StoreConnectionError,
    StoreTimeoutError,
)
from .models import HealthResponse
from .routes import measurements_router, plot_router
from .state.database import DEFAULT_SCHEMA_PATH, DatabaseClient
from .state.measurements import metadata

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if os.getenv("DEBUG") else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Squelch noisy loggers
for noisy in ("sqlalchemy.engine", "sqlalchemy.pool", "asyncpg", "matplotlib", "PIL"):
    logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app(
    database: Optional[DatabaseClient] = None,
    schema_path: Optional[str] = None,
) -> FastAPI:
    """
    Build the PerfBoard application.

    Args:
        database: Store gateway to use. Defaults to one configured from the environment.
        schema_path: SQL schema file applied at startup. Defaults to
            DATABASE_SCHEMA_PATH; an empty string creates tables from metadata instead.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Connects the database and applies the schema on startup.
        Disposes the connection pool on shutdown.
        """
        logger.info("PerfBoard starting up...")

        db = database or DatabaseClient()
        path = schema_path if schema_path is not None else os.getenv(
            "DATABASE_SCHEMA_PATH", DEFAULT_SCHEMA_PATH
        )
        # Applied now if the database is up, otherwise on the first session that reaches it
        db.use_schema(schema_path=path or None, metadata=None if path else metadata)

        try:
            await db.connect()
            await db.ensure_schema()
        except StoreConnectionError as e:
            logger.error(f"CRITICAL: Failed to connect to database: {e}")
            logger.error("Startup will continue but store requests and health checks will fail.")
        set_database(db)

        logger.info("PerfBoard ready")

        yield  # Application runs here

        logger.info("PerfBoard shutting down...")
        await db.close()
        set_database(None)
        logger.info("Database connection pool closed")

    app = FastAPI(
        title="PerfBoard",
        description="Build performance measurements and charts",
        version=__version__,
        lifespan=lifespan,
    )

    install_exception_handlers(app)
    install_service_routes(app)
    app.include_router(measurements_router)
    app.include_router(plot_router)
    return app


# =============================================================================
# Error Handlers
# =============================================================================

def install_exception_handlers(app: FastAPI) -> None:
    """Map the store error taxonomy and unexpected errors to HTTP responses."""

    @app.exception_handler(StoreConnectionError)
    async def _handle_store_unavailable(request: Request, exc: StoreConnectionError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path}: store unavailable: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Measurement store unavailable"})

    @app.exception_handler(StoreTimeoutError)
    async def _handle_store_timeout(request: Request, exc: StoreTimeoutError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"detail": "Measurement store timed out, retry later"},
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(SchemaBootstrapError)
    async def _handle_schema_missing(request: Request, exc: SchemaBootstrapError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path}: schema not in place: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Measurement store unavailable"})

    @app.exception_handler(StatementError)
    async def _handle_statement_error(request: Request, exc: StatementError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path}: statement failed: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Measurement store rejected the query"})

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"{request.method} {request.url.path}: unhandled error")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# =============================================================================
# Health / Info Endpoints
# =============================================================================

def install_service_routes(app: FastAPI) -> None:
    """Health and API info endpoints."""

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check() -> HealthResponse:
        """
        Health check endpoint for liveness/readiness checks.

        Returns {"status": "store_online"} when the database answers and the
        schema is in place. Returns 503 Service Unavailable otherwise.
        """
        try:
            database = await get_database()
            await database.ping()
        except (RuntimeError, StoreConnectionError, StoreTimeoutError, SchemaBootstrapError) as e:
            logger.warning(f"Health check failed: {e}")
            raise HTTPException(status_code=503, detail="Measurement store unavailable")
        return HealthResponse()

    @app.get("/info", tags=["info"])
    async def api_info() -> dict:
        """Get API information and available endpoints."""
        return {
            "name": "PerfBoard",
            "version": __version__,
            "description": "Build performance measurements and charts",
            "endpoints": {
                "health": "GET /health",
                "commit": "ANY /commit/{name}/{branch}/{build_number}/{time}",
                "show": "ANY /show",
                "plot": "ANY /plot/{test_name}/{from_build}/{build_count}",
                "generate_test_data": "ANY /generateTestData",
            },
        }


app = create_app()
