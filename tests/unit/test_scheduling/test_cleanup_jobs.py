"""Tests for scheduled job definitions."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stravabot.models.activity import ActivityMatch, ActivityRef, CleanupResult
from stravabot.observability.context import get_correlation_id
from stravabot.scheduling.jobs import BaseJob, DuplicateCleanupJob
from stravabot.utils.exceptions import CycleAbortedError


class ConcreteJob(BaseJob):
    """Concrete implementation for testing BaseJob."""

    def __init__(self, result=None, should_fail=False):
        super().__init__("test_job")
        self.result = result or {"status": "ok"}
        self.should_fail = should_fail
        self.seen_correlation_id = None

    async def run(self):
        self.seen_correlation_id = get_correlation_id()
        if self.should_fail:
            raise ValueError("Job failed")
        return self.result


def cleanup_result(*ids):
    matches = [
        ActivityMatch(
            indoor_activity=ActivityRef(id=i, name="Ride", start_date="2025-01-01T10:00:00Z"),
            virtual_ride=ActivityRef(id=i + 1000, name="Zwift", start_date="2025-01-01T10:05:00Z"),
        )
        for i in ids
    ]
    return CleanupResult(hidden=list(ids), matches=matches)


class TestBaseJob:
    """Tests for BaseJob class."""

    def test_init(self):
        """Should initialize with correct defaults."""
        job = ConcreteJob()

        assert job.name == "test_job"
        assert job.last_run is None
        assert job.run_count == 0
        assert job.error_count == 0

    @pytest.mark.asyncio
    async def test_call_success(self):
        """Should execute job and update stats on success."""
        job = ConcreteJob(result={"data": "test"})

        result = await job()

        assert result == {"data": "test"}
        assert job.last_success is not None
        assert job.run_count == 1
        assert job.error_count == 0

    @pytest.mark.asyncio
    async def test_call_failure(self):
        """Should update stats and re-raise on failure."""
        job = ConcreteJob(should_fail=True)

        with pytest.raises(ValueError):
            await job()

        assert job.last_run is not None
        assert job.last_success is None
        assert job.error_count == 1

    @pytest.mark.asyncio
    async def test_correlation_id_scoped_to_run(self):
        """Should set a job-named correlation ID and clear it afterwards."""
        job = ConcreteJob()

        await job()

        assert job.seen_correlation_id.startswith("test_job-")
        assert get_correlation_id() is None

    def test_get_status(self):
        """Should return status dictionary."""
        status = ConcreteJob().get_status()

        assert status == {
            "name": "test_job",
            "last_run": None,
            "last_success": None,
            "run_count": 0,
            "error_count": 0,
        }


class TestDuplicateCleanupJob:
    """Tests for DuplicateCleanupJob."""

    @pytest.mark.asyncio
    async def test_runs_one_cycle(self):
        """Should run a bot cycle and return the result as a dict."""
        bot = MagicMock()
        bot.run_cycle = AsyncMock(return_value=cleanup_result(11, 12))
        job = DuplicateCleanupJob(bot)

        result = await job()

        assert job.name == "duplicate_cleanup"
        assert result["hidden"] == [11, 12]
        assert len(result["matches"]) == 2
        bot.run_cycle.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_to_hide(self):
        bot = MagicMock()
        bot.run_cycle = AsyncMock(return_value=CleanupResult())

        result = await DuplicateCleanupJob(bot)()

        assert result == {"hidden": [], "matches": []}

    @pytest.mark.asyncio
    async def test_aborted_cycle_propagates(self):
        """Should count the failure and leave the next run to the scheduler."""
        bot = MagicMock()
        bot.run_cycle = AsyncMock(
            side_effect=CycleAbortedError("list_activities", partial_result=CleanupResult())
        )
        job = DuplicateCleanupJob(bot)

        with pytest.raises(CycleAbortedError):
            await job()

        assert job.error_count == 1

        bot.run_cycle = AsyncMock(return_value=CleanupResult())
        await job()
        assert job.run_count == 1
