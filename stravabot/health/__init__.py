"""Health check module.

Provides:
- Checks for credential state and last cycle outcome
- FastAPI health endpoints (/health, /ready, /live, /metrics)

Usage:
    from stravabot.health import HealthChecker, create_health_app, set_health_checker

    set_health_checker(HealthChecker(bot=bot, scheduler=scheduler))
    app = create_health_app()
"""

from stravabot.health.checks import (
    HealthChecker,
    HealthStatus,
    CheckStatus,
    CheckResult,
    HealthReport,
)
from stravabot.health.server import (
    create_health_app,
    get_health_checker,
    set_health_checker,
)

__all__ = [
    "HealthChecker",
    "HealthStatus",
    "CheckStatus",
    "CheckResult",
    "HealthReport",
    "create_health_app",
    "get_health_checker",
    "set_health_checker",
]
