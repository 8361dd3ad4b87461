"""FastAPI application factory and entry point.

Creates the application instance, registers middleware, and mounts the
auth, profile, admin and scrape-job routers.

Usage::

    # Development server (from project root)
    uvicorn fmcsa_registry.api.main:app --reload
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fmcsa_registry.config.settings import get_settings
from fmcsa_registry.core.logging_config import configure_logging, request_id_var

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Build and configure the FastAPI application.

    Separated from the module-level ``app`` singleton so that tests can
    call ``create_app()`` with a patched settings environment.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description=(
            "Subscription service that scrapes FMCSA SAFER company snapshots "
            "for MC-number ranges and exports the results as CSV."
        ),
        version="0.1.0",
        debug=settings.debug,
    )

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with status and duration under a fresh ``request_id``."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn(
                "request_complete",
                status_code=status_code,
                elapsed_ms=elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routers -----------------------------------------------------------

    from fmcsa_registry.api.routes import admin, profile  # noqa: PLC0415
    from fmcsa_registry.api.routes.auth import auth_router, users_router  # noqa: PLC0415
    from fmcsa_registry.scraper.router import router as scrape_jobs_router  # noqa: PLC0415

    application.include_router(auth_router, prefix="/auth")
    application.include_router(users_router, prefix="/users")
    application.include_router(profile.router)
    application.include_router(admin.router, prefix="/admin/users", tags=["admin:users"])
    application.include_router(
        scrape_jobs_router, prefix="/scrape-jobs", tags=["scrape-jobs"]
    )

    # ---- Health endpoint --------------------------------------------------

    @application.get("/health", tags=["system"])
    async def health() -> JSONResponse:
        """Process-level liveness check; performs no I/O."""
        return JSONResponse({"status": "ok"})

    logger.info(
        "application_configured",
        app_name=settings.app_name,
        debug=settings.debug,
        log_level=settings.log_level,
    )
    return application


app = create_app()
"""The FastAPI application instance passed to Uvicorn."""
