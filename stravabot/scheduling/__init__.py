"""Scheduling module.

Provides:
- APScheduler wrapper for the periodic cleanup cycle
- Job definitions with correlation IDs and run counters

Usage:
    from stravabot.scheduling import BotScheduler, DuplicateCleanupJob

    scheduler = BotScheduler()
    scheduler.schedule_cleanup(DuplicateCleanupJob(bot), minute="*/15")
    await scheduler.start()
"""

from stravabot.scheduling.scheduler import BotScheduler
from stravabot.scheduling.jobs import BaseJob, DuplicateCleanupJob

__all__ = [
    "BotScheduler",
    "BaseJob",
    "DuplicateCleanupJob",
]
