"""Prometheus metrics definitions for the duplicate cleanup bot.

Defines counters, gauges, and histograms for monitoring:
- Cycle outcomes
- Activities fetched and hidden
- Token refreshes
- Remote API requests and latency
- Scheduler status

Usage:
    from stravabot.observability.metrics import CYCLES_TOTAL, API_REQUEST_DURATION

    CYCLES_TOTAL.labels(status="success").inc()

    with API_REQUEST_DURATION.labels(operation="list_activities").time():
        await fetch()

Metrics are exposed via the /metrics endpoint in the health server.
"""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# Custom registry to avoid conflicts with the default registry
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================================================================
# COUNTERS
# =============================================================================

CYCLES_TOTAL = Counter(
    name="stravabot_cycles_total",
    documentation="Total duplicate cleanup cycles",
    labelnames=["status"],  # success, failed
    registry=REGISTRY,
)

ACTIVITIES_FETCHED = Counter(
    name="stravabot_activities_fetched_total",
    documentation="Total activity summaries fetched from the listing",
    registry=REGISTRY,
)

ACTIVITIES_HIDDEN = Counter(
    name="stravabot_activities_hidden_total",
    documentation="Total indoor duplicates hidden from the feed",
    registry=REGISTRY,
)

TOKEN_REFRESHES = Counter(
    name="stravabot_token_refreshes_total",
    documentation="Total refresh-token grant exchanges",
    labelnames=["status"],  # success, failed
    registry=REGISTRY,
)

API_REQUESTS_TOTAL = Counter(
    name="stravabot_api_requests_total",
    documentation="Total remote API requests",
    labelnames=["operation", "status"],  # token_refresh/list_activities/update_activity
    registry=REGISTRY,
)

# =============================================================================
# GAUGES
# =============================================================================

PROCESSED_ACTIVITIES = Gauge(
    name="stravabot_processed_activities",
    documentation="Activity ids held in processed memory",
    registry=REGISTRY,
)

SCHEDULER_JOBS = Gauge(
    name="stravabot_scheduler_jobs",
    documentation="Number of scheduled jobs",
    labelnames=["status"],  # pending, scheduled, paused
    registry=REGISTRY,
)

# =============================================================================
# HISTOGRAMS
# =============================================================================

API_REQUEST_DURATION = Histogram(
    name="stravabot_api_request_duration_seconds",
    documentation="Remote API request duration in seconds",
    labelnames=["operation"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, float("inf")),
    registry=REGISTRY,
)


def get_metrics_text() -> bytes:
    """Generate Prometheus metrics in text exposition format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Content-Type header value for the metrics response."""
    return CONTENT_TYPE_LATEST
