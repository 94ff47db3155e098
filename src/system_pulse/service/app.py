"""FastAPI service exposing the metrics snapshot."""

import secrets
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from system_pulse.aggregator import Aggregator
from system_pulse.aggregator.snapshot import format_timestamp
from system_pulse.config import AppConfig, Environment, get_settings
from system_pulse.telemetry import (
    AUTH_REJECTED,
    METRICS_COLLECTION_FAILED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    get_logger,
)

log = get_logger(__name__)

HealthResponse = dict[str, Any]


def _now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def require_token(request: Request) -> None:
    """Reject /api requests without the configured bearer token.

    Auth is disabled when no token is configured.

    Raises:
        HTTPException: 401 on a missing or wrong token.
    """
    expected = request.app.state.settings.auth_token
    if expected is None:
        return

    scheme, _, supplied = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(
        supplied.strip().encode(), expected.encode()
    ):
        log.warning(AUTH_REJECTED, path=request.url.path, has_header=bool(scheme))
        raise HTTPException(
            status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"}
        )


def cors_enabled(settings: AppConfig) -> bool:
    """CORS is on in development or when explicitly enabled."""
    return settings.enable_cors or settings.environment == Environment.DEVELOPMENT


def create_app(settings: AppConfig | None = None, aggregator: Aggregator | None = None) -> FastAPI:
    """Build the service application.

    Args:
        settings: Configuration; the settings singleton when omitted.
        aggregator: Pre-built aggregator; built from settings at startup when
            omitted.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        log.info(
            SERVICE_STARTING,
            host=settings.service_host,
            port=settings.service_port,
            auth_enabled=settings.auth_token is not None,
            cors_enabled=cors_enabled(settings),
        )
        app.state.aggregator = aggregator or Aggregator.from_settings(settings)
        log.info(SERVICE_READY, port=settings.service_port)

        yield

        log.info(SERVICE_STOPPED)

    app = FastAPI(
        title=f"{settings.project_name} Service",
        description="System telemetry snapshots for the dashboard",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()

    if cors_enabled(settings):
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            content = {
                "error": "Not found",
                "message": f"Route {request.method} {request.url.path} not found",
            }
        else:
            content = {"error": exc.detail}
        return JSONResponse(
            status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None)
        )

    # ========================================================================
    # Health Check
    # ========================================================================

    @app.get("/health")
    async def health_check(request: Request) -> HealthResponse:
        """Liveness check; never touches the probes."""
        return {
            "ok": True,
            "timestamp": _now(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "version": settings.version,
        }

    # ========================================================================
    # Metrics
    # ========================================================================

    @app.get("/api/metrics", dependencies=[Depends(require_token)])
    async def get_metrics(request: Request) -> JSONResponse:
        """Collect and return one snapshot."""
        try:
            snapshot = await request.app.state.aggregator.collect()
        except Exception as e:
            log.error(
                METRICS_COLLECTION_FAILED,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to fetch metrics", "message": str(e), "timestamp": _now()},
            )
        return JSONResponse(content=snapshot.to_dict())

    return app


app = create_app()
