"""Tests for correlation ID context management."""

import asyncio
import re

import pytest

from stravabot.observability.context import (
    correlation_id_context,
    get_correlation_id,
    new_correlation_id,
)


class TestNewCorrelationId:
    """Tests for new_correlation_id."""

    def test_prefixed_with_utc_timestamp(self):
        corr_id = new_correlation_id("duplicate_cleanup")

        assert re.fullmatch(r"duplicate_cleanup-\d{8}-\d{6}", corr_id)

    def test_uuid_without_prefix(self):
        assert len(new_correlation_id()) == 36


class TestCorrelationIdContext:
    """Tests for correlation_id_context."""

    def test_unset_outside_context(self):
        assert get_correlation_id() is None

    def test_restores_previous_value(self):
        """Should restore the outer ID on exit."""
        with correlation_id_context("outer"):
            with correlation_id_context("inner") as corr_id:
                assert corr_id == "inner"
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"

        assert get_correlation_id() is None

    def test_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with correlation_id_context("failing"):
                raise RuntimeError("boom")

        assert get_correlation_id() is None

    def test_generates_id(self):
        with correlation_id_context() as corr_id:
            assert get_correlation_id() == corr_id

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self):
        """Should keep concurrent cycles from seeing each other's ID."""

        async def observe(name):
            with correlation_id_context(name):
                await asyncio.sleep(0)
                return get_correlation_id()

        assert await asyncio.gather(observe("a"), observe("b")) == ["a", "b"]
