"""Tests for structured logging configuration."""

from unittest.mock import patch

import structlog

from stravabot.observability.context import correlation_id_context
from stravabot.observability.logging import (
    add_correlation_id_processor,
    configure_logging,
)


class TestAddCorrelationIdProcessor:
    """Tests for add_correlation_id_processor."""

    def test_adds_correlation_id_when_set(self):
        """Should add correlation_id to event dict when set."""
        with correlation_id_context("duplicate_cleanup-20250101-100000"):
            result = add_correlation_id_processor(None, "info", {"event": "activity_hidden"})

        assert result["correlation_id"] == "duplicate_cleanup-20250101-100000"

    def test_adds_none_marker_when_not_set(self):
        """Should add 'none' as correlation_id when not set."""
        result = add_correlation_id_processor(None, "info", {"event": "x", "count": 3})

        assert result["correlation_id"] == "none"
        assert result["count"] == 3


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_json_output(self):
        """Should end the processor chain with the JSON renderer."""
        with patch("structlog.configure") as mock_configure:
            configure_logging(level="DEBUG", json_output=True)

        processors = mock_configure.call_args[1]["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert add_correlation_id_processor in processors
        assert any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_console_output_without_timestamp(self):
        with patch("structlog.configure") as mock_configure:
            configure_logging(level="INFO", json_output=False, add_timestamp=False)

        processors = mock_configure.call_args[1]["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert not any(
            isinstance(p, structlog.processors.TimeStamper) for p in processors
        )

    def test_unknown_level_falls_back_to_info(self):
        """Should filter at INFO for an unknown level name."""
        with patch("structlog.configure"), patch(
            "structlog.make_filtering_bound_logger"
        ) as make_logger:
            configure_logging(level="chatty")

        make_logger.assert_called_once_with(20)
