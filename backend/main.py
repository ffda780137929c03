from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from sqlalchemy import text
from sqlalchemy.exc import OperationalError as SAOperationalError

from api.router import api_router
from core.bootstrap import ensure_schema
from core.config import settings
from core.database import DatabaseUnavailableError, ENGINE, is_transient_db_connectivity_error
from core.logging import setup_logging


logger = logging.getLogger(__name__)


_DB_UNAVAILABLE = {
    "code": "DATABASE_UNAVAILABLE",
    "message": "Database temporarily unavailable. Please retry.",
}
_DB_ERROR = {
    "code": "DATABASE_ERROR",
    "message": "Database operation failed.",
}


def create_app() -> FastAPI:
    setup_logging(
        environment=settings.environment,
        level=settings.log_level,
        log_dir=settings.log_dir,
        seating_trace=settings.seating_trace,
    )
    is_production = settings.environment == "production"
    app = FastAPI(
        title="Exam Seating API",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )

    @app.exception_handler(DatabaseUnavailableError)
    def _db_unavailable(_request, _exc: DatabaseUnavailableError):
        logger.warning("Database unavailable (503)", exc_info=_exc)
        return JSONResponse(status_code=503, content=_DB_UNAVAILABLE)

    @app.exception_handler(SAOperationalError)
    def _sqlalchemy_operational_error(_request, exc: SAOperationalError):
        if is_transient_db_connectivity_error(exc):
            logger.warning("Database transient connectivity error (503)", exc_info=exc)
            return JSONResponse(status_code=503, content=_DB_UNAVAILABLE)
        logger.error("Database operational error (500)", exc_info=exc)
        return JSONResponse(status_code=500, content=_DB_ERROR)

    # Driver-level errors that escape SQLAlchemy wrapping (Postgres deployments only).
    try:
        import psycopg2  # type: ignore

        @app.exception_handler(psycopg2.OperationalError)  # type: ignore[attr-defined]
        def _psycopg2_operational_error(_request, exc: Exception):
            if is_transient_db_connectivity_error(exc):
                return JSONResponse(status_code=503, content=_DB_UNAVAILABLE)
            return JSONResponse(status_code=500, content=_DB_ERROR)
    except ImportError:
        logger.debug("psycopg2 not installed; skipping driver error handler")

    allow_origins = [settings.frontend_origin]
    allow_origin_regex = None
    if not is_production:
        # Dev-friendly: allow the configured origin and any localhost port.
        allow_origins.extend(["http://localhost:5173", "http://127.0.0.1:5173"])
        allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    try:
        ensure_schema()
    except Exception:
        # The API still starts; requests will surface 503s until the database is reachable.
        logger.exception("Schema bootstrap failed")

    @app.get("/health")
    def health() -> dict:
        # Always respond; reflect DB availability without crashing.
        db_status = "ok"
        try:
            with ENGINE.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            db_status = "down"

        return {"app": "ok", "database": db_status}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
