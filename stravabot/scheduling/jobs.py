"""Scheduled job definitions.

BaseJob wraps a job body with a correlation id, timing and run counters.
DuplicateCleanupJob runs one duplicate correlation cycle per execution.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import structlog

from stravabot.observability.context import correlation_id_context, new_correlation_id
from stravabot.orchestration.bot import StravaBot

logger = structlog.get_logger()


class BaseJob(ABC):
    """Callable handed to the scheduler.

    Failures are counted, logged and re-raised so APScheduler reports them
    through its error listener; the next tick runs regardless.
    """

    def __init__(self, name: str):
        self.name = name
        self.last_run: Optional[datetime] = None
        self.last_success: Optional[datetime] = None
        self.run_count: int = 0
        self.error_count: int = 0

    async def __call__(self) -> Any:
        with correlation_id_context(new_correlation_id(self.name)):
            started = time.monotonic()
            logger.info("job_starting", job_name=self.name)
            try:
                result = await self.run()
            except Exception as e:
                self.error_count += 1
                logger.error(
                    "job_failed",
                    job_name=self.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise
            finally:
                self.last_run = datetime.now(timezone.utc)

            self.run_count += 1
            self.last_success = self.last_run
            logger.info(
                "job_completed",
                job_name=self.name,
                duration_seconds=round(time.monotonic() - started, 2),
            )
            return result

    @abstractmethod
    async def run(self) -> Any:
        ...

    def get_status(self) -> Dict[str, Any]:
        def iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "name": self.name,
            "last_run": iso(self.last_run),
            "last_success": iso(self.last_success),
            "run_count": self.run_count,
            "error_count": self.error_count,
        }


class DuplicateCleanupJob(BaseJob):
    """Hide indoor ride duplicates.

    The bot instance is reused across executions so processed memory and
    the credential survive between cycles.
    """

    def __init__(self, bot: StravaBot):
        super().__init__("duplicate_cleanup")
        self.bot = bot

    async def run(self) -> Dict[str, Any]:
        result = await self.bot.run_cycle()

        if result.hidden:
            logger.info(
                "duplicates_hidden",
                count=len(result.hidden),
                activity_ids=result.hidden,
            )

        return result.to_dict()
