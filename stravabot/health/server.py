"""FastAPI health server for production monitoring.

Provides HTTP endpoints for:
- /health - Credential and last-cycle checks
- /ready - Readiness probe
- /live - Liveness probe
- /metrics - Prometheus metrics in text format
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
import structlog

from stravabot.health.checks import HealthChecker, HealthStatus
from stravabot.observability.metrics import get_metrics_text, get_metrics_content_type

logger = structlog.get_logger()

_health_checker: Optional[HealthChecker] = None


def get_health_checker() -> HealthChecker:
    """Get or create the global health checker instance."""
    global _health_checker
    if _health_checker is None:
        _health_checker = HealthChecker()
    return _health_checker


def set_health_checker(checker: HealthChecker) -> None:
    """Set the global health checker instance."""
    global _health_checker
    _health_checker = checker


def create_health_app(
    title: str = "Strava Dedup Bot Health API",
    version: str = "1.0.0",
) -> FastAPI:
    """Create FastAPI application with health endpoints."""
    app = FastAPI(
        title=title,
        version=version,
        description="Health check and metrics endpoints for the duplicate cleanup bot",
    )

    @app.get("/health", response_model=None, summary="Full health check")
    async def health_check() -> Response:
        """Returns 200 if healthy/degraded, 503 if unhealthy."""
        report = await get_health_checker().check_all()

        status_code = (
            status.HTTP_200_OK
            if report.status != HealthStatus.UNHEALTHY
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return JSONResponse(content=report.to_dict(), status_code=status_code)

    @app.get("/ready", response_model=None, summary="Readiness probe")
    async def readiness_probe() -> Response:
        if await get_health_checker().is_ready():
            return JSONResponse(
                content={"ready": True, "message": "Service is ready"},
                status_code=status.HTTP_200_OK,
            )
        return JSONResponse(
            content={"ready": False, "message": "Service is not ready"},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @app.get("/live", response_model=None, summary="Liveness probe")
    async def liveness_probe() -> Response:
        is_alive = await get_health_checker().is_alive()
        return JSONResponse(
            content={"alive": is_alive, "message": "Service is alive"},
            status_code=status.HTTP_200_OK,
        )

    @app.get("/metrics", response_class=PlainTextResponse, summary="Prometheus metrics")
    async def prometheus_metrics() -> Response:
        return Response(
            content=get_metrics_text(),
            media_type=get_metrics_content_type(),
        )

    @app.get("/", response_model=None, summary="Root endpoint")
    async def root() -> Dict[str, Any]:
        return {
            "name": title,
            "version": version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "live": "/live",
                "metrics": "/metrics",
            },
        }

    return app


async def run_health_server_async(
    host: str = "0.0.0.0",
    port: int = 8000,
    log_level: str = "warning",
) -> None:
    """Run health server inside the current event loop."""
    import uvicorn

    config = uvicorn.Config(
        create_health_app(),
        host=host,
        port=port,
        log_level=log_level,
        access_log=False,
    )
    server = uvicorn.Server(config)

    logger.info("health_server_starting", host=host, port=port)
    await server.serve()
