"""Observability module.

Provides:
- Correlation ID context management for cycle tracing
- Structured logging with context propagation
- Prometheus metrics for monitoring and alerting
- CycleEvents, the sink the core reports to

Usage:
    from stravabot.observability import (
        configure_logging,
        correlation_id_context,
        new_correlation_id,
    )

    configure_logging(level="INFO")
    with correlation_id_context(new_correlation_id("run")):
        await bot.run_cycle()
"""

from stravabot.observability.context import (
    get_correlation_id,
    new_correlation_id,
    correlation_id_context,
)
from stravabot.observability.logging import (
    configure_logging,
    add_correlation_id_processor,
)
from stravabot.observability.metrics import (
    CYCLES_TOTAL,
    ACTIVITIES_FETCHED,
    ACTIVITIES_HIDDEN,
    TOKEN_REFRESHES,
    API_REQUESTS_TOTAL,
    PROCESSED_ACTIVITIES,
    SCHEDULER_JOBS,
    API_REQUEST_DURATION,
    get_metrics_text,
)
from stravabot.observability.events import CycleEvents

__all__ = [
    # Context
    "get_correlation_id",
    "new_correlation_id",
    "correlation_id_context",
    # Logging
    "configure_logging",
    "add_correlation_id_processor",
    # Metrics
    "CYCLES_TOTAL",
    "ACTIVITIES_FETCHED",
    "ACTIVITIES_HIDDEN",
    "TOKEN_REFRESHES",
    "API_REQUESTS_TOTAL",
    "PROCESSED_ACTIVITIES",
    "SCHEDULER_JOBS",
    "API_REQUEST_DURATION",
    "get_metrics_text",
    # Events
    "CycleEvents",
]
