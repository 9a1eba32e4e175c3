"""Health checks for the running bot.

Provides checks for:
- Credential state (token held, time to expiry)
- Outcome of the most recent cycle

Usage:
    checker = HealthChecker(bot=bot, scheduler=scheduler)
    report = await checker.check_all()
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from stravabot.orchestration.bot import StravaBot
from stravabot.scheduling.scheduler import BotScheduler

logger = structlog.get_logger()


class HealthStatus(str, Enum):
    """Overall health status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class CheckStatus(str, Enum):
    """Individual check status."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: CheckStatus
    message: str
    duration_ms: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "duration_ms": round(self.duration_ms, 2),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class HealthReport:
    """Complete health report with all check results."""

    status: HealthStatus
    checks: List[CheckResult]
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": [c.to_dict() for c in self.checks],
            "timestamp": self.timestamp.isoformat(),
        }


class HealthChecker:
    """Health checker for the bot process."""

    def __init__(
        self,
        bot: Optional[StravaBot] = None,
        scheduler: Optional[BotScheduler] = None,
    ):
        self.bot = bot
        self.scheduler = scheduler

    async def check_all(self) -> HealthReport:
        checks = [self.check_credential(), self.check_last_cycle()]
        return HealthReport(status=self._determine_overall_status(checks), checks=checks)

    def _determine_overall_status(self, checks: List[CheckResult]) -> HealthStatus:
        if any(c.status == CheckStatus.FAIL for c in checks):
            return HealthStatus.UNHEALTHY
        if any(c.status == CheckStatus.WARN for c in checks):
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def check_credential(self) -> CheckResult:
        start = time.time()
        name = "credential"

        if self.bot is None:
            return CheckResult(
                name=name, status=CheckStatus.FAIL, message="Bot not initialized"
            )

        store = self.bot.credentials
        snapshot = store.snapshot
        details = {
            "has_access_token": bool(snapshot.access_token),
            "expires_at": snapshot.expires_at or None,
        }
        duration_ms = (time.time() - start) * 1000

        if not snapshot.access_token:
            return CheckResult(
                name=name,
                status=CheckStatus.WARN,
                message="No access token yet; refreshed on first cycle",
                duration_ms=duration_ms,
                details=details,
            )

        remaining = store.seconds_until_expiry()
        details["seconds_until_expiry"] = round(remaining)
        if store.needs_refresh():
            return CheckResult(
                name=name,
                status=CheckStatus.WARN,
                message="Access token expiring; refreshed on next cycle",
                duration_ms=duration_ms,
                details=details,
            )

        return CheckResult(
            name=name,
            status=CheckStatus.PASS,
            message="Access token valid",
            duration_ms=duration_ms,
            details=details,
        )

    def check_last_cycle(self) -> CheckResult:
        name = "last_cycle"

        if self.bot is None:
            return CheckResult(
                name=name, status=CheckStatus.FAIL, message="Bot not initialized"
            )

        details = self.bot.status()

        if self.bot.last_cycle_ok is None:
            return CheckResult(
                name=name,
                status=CheckStatus.WARN,
                message="No cycle has run yet",
                details=details,
            )

        if not self.bot.last_cycle_ok:
            return CheckResult(
                name=name,
                status=CheckStatus.FAIL,
                message=f"Last cycle failed: {self.bot.last_error}",
                details=details,
            )

        return CheckResult(
            name=name,
            status=CheckStatus.PASS,
            message="Last cycle succeeded",
            details=details,
        )

    async def is_alive(self) -> bool:
        return True

    async def is_ready(self) -> bool:
        if self.bot is None:
            return False
        if self.scheduler is not None:
            return self.scheduler.is_running
        return True
