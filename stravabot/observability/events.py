"""Observability sink for the duplicate cleanup core.

The core calls these hooks at fixed points instead of writing output
itself. The default implementation emits structlog events and updates
Prometheus metrics; tests can pass a recording subclass.
"""

from typing import Optional

import structlog

from stravabot.models.activity import ActivityMatch, CleanupResult
from stravabot.observability.metrics import (
    ACTIVITIES_FETCHED,
    ACTIVITIES_HIDDEN,
    CYCLES_TOTAL,
    PROCESSED_ACTIVITIES,
    TOKEN_REFRESHES,
)

logger = structlog.get_logger()


class CycleEvents:
    """Default sink: structured logs plus metrics"""

    def token_refreshed(self, expires_at: int) -> None:
        TOKEN_REFRESHES.labels(status="success").inc()
        logger.info("token_refreshed", expires_at=expires_at)

    def page_fetched(self, page: int, count: int) -> None:
        ACTIVITIES_FETCHED.inc(count)
        logger.info("activities_fetched", page=page, count=count)

    def activity_hidden(self, match: ActivityMatch, processed_count: int) -> None:
        ACTIVITIES_HIDDEN.inc()
        PROCESSED_ACTIVITIES.set(processed_count)
        logger.info(
            "activity_hidden",
            activity_id=match.indoor_activity.id,
            activity_name=match.indoor_activity.name,
            virtual_ride_id=match.virtual_ride.id,
        )

    def operation_failed(
        self,
        operation: str,
        error: Exception,
        activity_id: Optional[int] = None,
        status: Optional[int] = None,
    ) -> None:
        if operation == "token_refresh":
            TOKEN_REFRESHES.labels(status="failed").inc()
        logger.error(
            "operation_failed",
            operation=operation,
            activity_id=activity_id,
            status=status,
            error=str(error),
            error_type=type(error).__name__,
        )

    def cycle_completed(self, result: CleanupResult) -> None:
        CYCLES_TOTAL.labels(status="success").inc()
        logger.info(
            "cycle_completed",
            hidden=len(result.hidden),
            hidden_ids=result.hidden,
        )

    def cycle_failed(self, operation: str, hidden_before_failure: int) -> None:
        CYCLES_TOTAL.labels(status="failed").inc()
        logger.warning(
            "cycle_aborted",
            operation=operation,
            hidden_before_failure=hidden_before_failure,
        )
