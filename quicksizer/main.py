"""
main.py — Quicksizer FastAPI application entry point.

Start with: uvicorn quicksizer.main:app --reload --port 2022
"""
import logging
import os
import subprocess
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quicksizer.cache import create_redis_client
from quicksizer.config import Settings, settings as default_settings
from quicksizer.database import build_engine, build_session_factory, create_tables
from quicksizer.exceptions import DuplicateSession, StorageFailure, ValidationError
from quicksizer.service import CostEstimationService

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
    )


def run_migrations(settings: Settings) -> None:
    """Apply Alembic migrations up to head against settings.database_url."""
    package_dir = os.path.dirname(os.path.abspath(__file__))
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        capture_output=True,
        text=True,
        cwd=package_dir,
        env={**os.environ, "DATABASE_URL": settings.database_url},
    )
    if result.returncode != 0:
        logger.error("Alembic migration failed:\n%s", result.stderr)
        raise RuntimeError(f"Alembic migration failed: {result.stderr}")
    msg = result.stdout.strip() or "No pending migrations"
    logger.info("Alembic: %s", msg)


# ---------------------------------------------------------------------------
# Error response helper
# ---------------------------------------------------------------------------
def _make_error_response(
    code: str,
    message: str,
    details: Optional[list[dict[str, Any]]] = None,
    status_code: int = 500,
) -> JSONResponse:
    """Build a standard {error: {code, message, details}} response."""
    body = {
        "error": {
            "code": code,
            "message": message,
            "details": details or [],
        }
    }
    return JSONResponse(status_code=status_code, content=body)


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed request bodies / path parameters → 422 with every field violation."""
        details = []
        for error in exc.errors():
            # Build dot-notation field path, excluding the top-level 'body'/'path' loc
            field = ".".join(str(loc) for loc in error["loc"] if loc not in ("body", "path"))
            details.append({"field": field or None, "issue": error["msg"]})
        return _make_error_response(
            code="VALIDATION_ERROR",
            message="Request validation failed",
            details=details,
            status_code=422,
        )

    @app.exception_handler(ValidationError)
    async def questionnaire_validation_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return _make_error_response(
            code="VALIDATION_ERROR",
            message="Questionnaire validation failed",
            details=exc.violations,
            status_code=422,
        )

    @app.exception_handler(DuplicateSession)
    async def duplicate_session_handler(
        request: Request, exc: DuplicateSession
    ) -> JSONResponse:
        return _make_error_response(
            code="CONFLICT",
            message=str(exc),
            details=[{"field": "session_id", "issue": "already submitted"}],
            status_code=409,
        )

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(
        request: Request, exc: StorageFailure
    ) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return _make_error_response(
            code="STORAGE_UNAVAILABLE",
            message="The estimate store is temporarily unavailable",
            status_code=503,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Converts HTTPException to standard error format with semantic code."""
        code_map = {
            400: "BAD_REQUEST",
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            409: "CONFLICT",
            422: "VALIDATION_ERROR",
        }
        code = code_map.get(exc.status_code, f"HTTP_{exc.status_code}")
        return _make_error_response(
            code=code,
            message=str(exc.detail),
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """
        Catch-all for unexpected errors.
        DEBUG=true  → includes exception type & message in details (dev only).
        DEBUG=false → generic message; full traceback logged server-side only.
        """
        logger.error(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
            exc_info=True,
        )
        if settings.debug:
            details = [{"issue": f"{type(exc).__name__}: {exc}"}]
            message = "An unexpected error occurred (debug details included)"
        else:
            details = []
            message = "An unexpected error occurred"
        return _make_error_response(
            code="INTERNAL_ERROR",
            message=message,
            details=details,
            status_code=500,
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the Quicksizer application.

    Everything stateful (engine, session factory, stores, Redis client) is
    created in the lifespan hook and kept on app.state.
    """
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
          1. Database schema: Alembic migrations, or create_all when disabled
          2. Session factory + CostEstimationService
          3. Redis result cache (optional)
        Shutdown:
          1. Close Redis client, dispose engine
        """
        engine = build_engine(settings)
        if settings.run_migrations:
            run_migrations(settings)
        else:
            await create_tables(engine)
            logger.info("Tables created from ORM metadata (migrations disabled)")

        app.state.settings = settings
        app.state.engine = engine
        app.state.service = CostEstimationService.from_session_factory(
            build_session_factory(engine)
        )
        app.state.redis = await create_redis_client(settings)

        logger.info("Quicksizer v%s starting up", settings.app_version)
        yield

        # --- Shutdown ---
        if app.state.redis is not None:
            await app.state.redis.aclose()
            logger.info("Redis client closed")
        await engine.dispose()
        logger.info("Quicksizer shutting down")

    app = FastAPI(
        title="Quicksizer API",
        version=settings.app_version,
        description=(
            "Collects customer platform requirements and derives a deterministic "
            "monthly/annual cost estimate with advisory recommendations."
        ),
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # CORS middleware — restricted to frontend origins from settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    @app.get("/api/health", tags=["System"])
    async def health_check() -> dict:
        """Returns service health status."""
        return {
            "status": "ok",
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    from quicksizer.estimation.routes import router as estimation_router
    from quicksizer.questionnaire.routes import router as questionnaire_router

    app.include_router(questionnaire_router)
    app.include_router(estimation_router)
    return app


app = create_app()
