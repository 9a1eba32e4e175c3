"""Tests for BotScheduler."""

import asyncio
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from stravabot.observability.metrics import REGISTRY
from stravabot.scheduling.scheduler import CLEANUP_JOB_ID, BotScheduler


async def cleanup():
    pass


def jobs_in_state(state):
    return REGISTRY.get_sample_value("stravabot_scheduler_jobs", {"status": state})


class TestScheduleCleanup:
    """Tests for registering the cleanup job."""

    @pytest.mark.asyncio
    async def test_overlap_protection(self):
        """Should run at most one cycle at a time and coalesce missed ticks."""
        scheduler = BotScheduler()
        scheduler.schedule_cleanup(cleanup)
        runner = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0)

        job = scheduler.scheduler.get_job(CLEANUP_JOB_ID)

        assert job.max_instances == 1
        assert job.coalesce is True

        await scheduler.shutdown()
        await asyncio.wait_for(runner, timeout=1)

    def test_cron_minute_field(self):
        """Should fire on the configured minute field."""
        scheduler = BotScheduler()

        job = scheduler.schedule_cleanup(cleanup, minute="*/15")

        assert "minute='*/15'" in str(job.trigger)

    def test_rescheduling_replaces_job(self):
        """Should keep a single cleanup job."""
        scheduler = BotScheduler()

        scheduler.schedule_cleanup(cleanup, minute="*/15")
        scheduler.schedule_cleanup(cleanup, minute="*/5")

        jobs = scheduler.describe_jobs()
        assert len(jobs) == 1
        assert jobs[0]["id"] == CLEANUP_JOB_ID

    def test_invalid_minute(self):
        with pytest.raises(ValueError):
            BotScheduler().schedule_cleanup(cleanup, minute="every-quarter")

    def test_pending_until_started(self):
        """Should report the job as pending before the scheduler starts."""
        scheduler = BotScheduler()
        scheduler.schedule_cleanup(cleanup)

        assert scheduler.describe_jobs() == [
            {"id": CLEANUP_JOB_ID, "state": "pending", "next_run_time": None}
        ]
        assert jobs_in_state("pending") == 1


class TestPauseResume:
    """Tests for pausing and resuming the cleanup job."""

    def test_pause_and_resume(self):
        scheduler = BotScheduler()
        scheduler.schedule_cleanup(cleanup)

        assert scheduler.pause_cleanup() is True
        assert scheduler.describe_jobs()[0]["state"] == "paused"
        assert jobs_in_state("paused") == 1

        assert scheduler.resume_cleanup() is True
        assert scheduler.describe_jobs()[0]["state"] == "scheduled"
        assert scheduler.describe_jobs()[0]["next_run_time"] is not None

    def test_nothing_scheduled(self):
        """Should return False when the cleanup job was never scheduled."""
        scheduler = BotScheduler()

        assert scheduler.pause_cleanup() is False
        assert scheduler.resume_cleanup() is False


class TestLifecycle:
    """Tests for start/shutdown."""

    def test_not_running_initially(self):
        assert BotScheduler().is_running is False

    @pytest.mark.asyncio
    async def test_shutdown_when_not_running(self):
        """Should be a no-op before start."""
        scheduler = BotScheduler()

        await scheduler.shutdown()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_start_blocks_until_shutdown(self):
        """Should run until shutdown() releases start()."""
        scheduler = BotScheduler()
        scheduler.schedule_cleanup(cleanup)

        runner = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0)

        assert scheduler.is_running is True
        assert scheduler.describe_jobs()[0]["state"] == "scheduled"
        assert not runner.done()

        await scheduler.shutdown()
        await asyncio.wait_for(runner, timeout=1)

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_start_twice_returns_immediately(self):
        scheduler = BotScheduler()
        runner = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0)

        await asyncio.wait_for(scheduler.start(), timeout=1)

        await scheduler.shutdown()
        await asyncio.wait_for(runner, timeout=1)

    @pytest.mark.asyncio
    async def test_shutdown_request(self):
        """Should stop the scheduler when a shutdown signal arrives."""
        scheduler = BotScheduler()
        runner = asyncio.create_task(scheduler.start())
        await asyncio.sleep(0)

        scheduler.request_shutdown()
        await asyncio.wait_for(runner, timeout=1)

        assert scheduler.is_running is False


class TestEventListeners:
    """Tests for job event listeners."""

    def test_failed_and_missed_runs_do_not_raise(self):
        """Should log failed and missed runs without stopping the scheduler."""
        scheduler = BotScheduler()
        event = MagicMock()
        event.job_id = CLEANUP_JOB_ID
        event.scheduled_run_time = datetime.now()
        event.exception = RuntimeError("cycle aborted")

        scheduler._on_job_error(event)
        scheduler._on_job_missed(event)
