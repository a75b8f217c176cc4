"""Demo FastAPI application wired with the fingerprint middleware."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .analytics import RequestAnalytics
from .config.settings import settings
from .middleware import APP_STATE_KEY, FingerprintMiddleware


def _configure_logging() -> None:
    """Stream application logs to stdout and a rotating file."""

    logging.getLogger().handlers.clear()

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)

    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    noisy_loggers = [
        "clickhouse_driver",
        "urllib3",
        "sqlalchemy.engine",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app(analytics: Optional[RequestAnalytics] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    When ``analytics`` is given it is used as is and left open on shutdown;
    otherwise the component is built from settings during startup.
    """

    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Persists a fingerprint of every request to ClickHouse.",
    )

    app.add_middleware(FingerprintMiddleware)

    if analytics is not None:
        setattr(app.state, APP_STATE_KEY, analytics)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "operational",
        }

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.on_event("startup")
    async def startup_event() -> None:
        if analytics is None:
            component = await run_in_threadpool(RequestAnalytics.from_settings, settings)
            setattr(app.state, APP_STATE_KEY, component)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        if analytics is None:
            component = getattr(app.state, APP_STATE_KEY, None)
            if component is not None:
                component.close()

    return app


if __name__ == "__main__":
    uvicorn.run(
        "request_analytics.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
