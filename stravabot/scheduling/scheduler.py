"""Periodic trigger for the cleanup cycle.

A single cron job on an AsyncIOScheduler. ``max_instances=1`` keeps cycles
from overlapping and ``coalesce`` folds ticks that were missed while a
cycle was still running into one run.
"""

import asyncio
import signal
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from stravabot.observability.metrics import SCHEDULER_JOBS

logger = structlog.get_logger()

CLEANUP_JOB_ID = "duplicate_cleanup"
SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


def job_state(job: Job) -> str:
    # next_run_time is only assigned once the scheduler has started
    if not hasattr(job, "next_run_time"):
        return "pending"
    return "paused" if job.next_run_time is None else "scheduled"


class BotScheduler:
    """Runs the cleanup job every ``minute`` cron tick until shut down"""

    def __init__(self, timezone: str = "UTC", misfire_grace_time: int = 300):
        self.timezone = timezone
        self.scheduler = AsyncIOScheduler(
            timezone=timezone,
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": misfire_grace_time,
            },
        )
        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        self.scheduler.add_listener(self._on_job_missed, EVENT_JOB_MISSED)
        self._stopped: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self.scheduler.running

    def schedule_cleanup(
        self,
        job: Callable[[], Awaitable[Any]],
        minute: str = "*/15",
    ) -> Job:
        """Register (or replace) the cleanup job.

        Raises:
            ValueError: If ``minute`` is not a valid cron minute field
        """
        trigger = CronTrigger(minute=minute, timezone=self.timezone)
        # replace_existing only applies once the scheduler has started
        if self.scheduler.get_job(CLEANUP_JOB_ID) is not None:
            self.scheduler.remove_job(CLEANUP_JOB_ID)
        scheduled = self.scheduler.add_job(
            job,
            trigger=trigger,
            id=CLEANUP_JOB_ID,
            name=CLEANUP_JOB_ID,
            replace_existing=True,
        )
        logger.info("cleanup_scheduled", minute=minute, timezone=self.timezone)
        self._update_metrics()
        return scheduled

    def pause_cleanup(self) -> bool:
        """Stop firing the cleanup job; False if it was never scheduled"""
        return self._set_paused(True)

    def resume_cleanup(self) -> bool:
        return self._set_paused(False)

    def _set_paused(self, paused: bool) -> bool:
        action = "pause" if paused else "resume"
        try:
            if paused:
                self.scheduler.pause_job(CLEANUP_JOB_ID)
            else:
                self.scheduler.resume_job(CLEANUP_JOB_ID)
        except JobLookupError:
            logger.warning("cleanup_not_scheduled", action=action)
            return False

        logger.info("cleanup_" + ("paused" if paused else "resumed"))
        self._update_metrics()
        return True

    def describe_jobs(self) -> List[Dict[str, Any]]:
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append(
                {
                    "id": job.id,
                    "state": job_state(job),
                    "next_run_time": next_run.isoformat() if next_run else None,
                }
            )
        return jobs

    async def start(self) -> None:
        """Start firing jobs and block until shutdown() or SIGTERM/SIGINT"""
        if self.is_running:
            logger.warning("scheduler_already_running")
            return

        self._stopped = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self.request_shutdown)

        self.scheduler.start()
        self._update_metrics()
        logger.info("scheduler_started", jobs=self.describe_jobs())

        try:
            await self._stopped.wait()
        finally:
            for sig in SHUTDOWN_SIGNALS:
                loop.remove_signal_handler(sig)

    def request_shutdown(self) -> None:
        logger.info("shutdown_signal_received")
        asyncio.get_running_loop().create_task(self.shutdown())

    async def shutdown(self, wait: bool = True) -> None:
        """Stop the scheduler and release start()"""
        if self.is_running:
            self.scheduler.shutdown(wait=wait)
            logger.info("scheduler_stopped")
        if self._stopped is not None:
            self._stopped.set()

    def _on_job_error(self, event: JobExecutionEvent) -> None:
        # The job logged the failed cycle itself; the next tick still fires
        logger.warning(
            "scheduled_run_failed",
            job_id=event.job_id,
            error_type=type(event.exception).__name__,
        )
        self._update_metrics()

    def _on_job_missed(self, event: JobExecutionEvent) -> None:
        logger.warning(
            "scheduled_run_missed",
            job_id=event.job_id,
            scheduled_run_time=str(event.scheduled_run_time),
        )

    def _update_metrics(self) -> None:
        counts = {"pending": 0, "scheduled": 0, "paused": 0}
        for job in self.scheduler.get_jobs():
            counts[job_state(job)] += 1
        for state, count in counts.items():
            SCHEDULER_JOBS.labels(status=state).set(count)
