import asyncio
from typing import Any, List, Optional

import aiohttp
import structlog
from pydantic import TypeAdapter, ValidationError

from stravabot.models.activity import ActivitySummary, UpdateDetails
from stravabot.observability.metrics import API_REQUEST_DURATION, API_REQUESTS_TOTAL
from stravabot.services.activities.base import (
    ActivityMutator,
    ActivityReader,
    validate_page_params,
)
from stravabot.services.credential_store import TokenRefresher
from stravabot.utils.exceptions import ParseError, TransportError, UpdateError

logger = structlog.get_logger()

_ACTIVITY_LIST = TypeAdapter(List[ActivitySummary])


class StravaActivityClient(ActivityReader, ActivityMutator):
    """Strava API v3 activity client, authenticated through TokenRefresher"""

    BASE_URL = "https://www.strava.com/api/v3"

    def __init__(
        self,
        tokens: TokenRefresher,
        base_url: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ):
        self.tokens = tokens
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _headers(self, token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout_seconds)

    async def list_activities(self, page: int, page_size: int) -> List[ActivitySummary]:
        """Fetch one page of the authenticated athlete's activities"""
        validate_page_params(page, page_size)
        operation = "list_activities"

        token = await self.tokens.get_valid_token()

        logger.debug("activities_requested", page=page, per_page=page_size)

        try:
            with API_REQUEST_DURATION.labels(operation=operation).time():
                async with aiohttp.ClientSession() as session:
                    async with session.get(
                        f"{self.base_url}/athlete/activities",
                        params={"page": str(page), "per_page": str(page_size)},
                        headers=self._headers(token),
                        timeout=self._timeout(),
                    ) as response:
                        API_REQUESTS_TOTAL.labels(
                            operation=operation, status=str(response.status)
                        ).inc()

                        if not 200 <= response.status < 300:
                            raise TransportError(
                                f"Activity listing failed: HTTP {response.status}",
                                operation=operation,
                                status=response.status,
                            )

                        data = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            API_REQUESTS_TOTAL.labels(operation=operation, status="timeout").inc()
            raise TransportError(
                "Activity listing timed out", operation=operation
            ) from e
        except aiohttp.ClientError as e:
            API_REQUESTS_TOTAL.labels(operation=operation, status="error").inc()
            raise TransportError(
                f"Activity listing request failed: {e}", operation=operation
            ) from e
        except ValueError as e:
            raise ParseError("Activity listing returned a non-JSON body", operation=operation) from e

        activities = self._parse_activities(data)
        logger.debug("activities_received", page=page, count=len(activities))
        return activities

    async def update(self, activity_id: int, details: UpdateDetails) -> ActivitySummary:
        """Send a sparse PUT /activities/{id}"""
        operation = "update_activity"
        payload = details.to_payload()

        token = await self.tokens.get_valid_token()

        logger.info(
            "activity_update_requested",
            activity_id=activity_id,
            fields=sorted(payload),
        )

        try:
            with API_REQUEST_DURATION.labels(operation=operation).time():
                async with aiohttp.ClientSession() as session:
                    async with session.put(
                        f"{self.base_url}/activities/{activity_id}",
                        json=payload,
                        headers=self._headers(token),
                        timeout=self._timeout(),
                    ) as response:
                        API_REQUESTS_TOTAL.labels(
                            operation=operation, status=str(response.status)
                        ).inc()

                        if not 200 <= response.status < 300:
                            logger.error(
                                "activity_update_failed",
                                activity_id=activity_id,
                                status=response.status,
                                reason=response.reason or "Unknown",
                            )
                            raise UpdateError(
                                f"Update of activity {activity_id} failed: "
                                f"HTTP {response.status}",
                                activity_id=activity_id,
                                status=response.status,
                            )

                        data = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            API_REQUESTS_TOTAL.labels(operation=operation, status="timeout").inc()
            raise TransportError(
                f"Update of activity {activity_id} timed out",
                operation=operation,
                activity_id=activity_id,
            ) from e
        except aiohttp.ClientError as e:
            API_REQUESTS_TOTAL.labels(operation=operation, status="error").inc()
            raise TransportError(
                f"Update of activity {activity_id} failed: {e}",
                operation=operation,
                activity_id=activity_id,
            ) from e
        except ValueError as e:
            raise ParseError(
                "Activity update returned a non-JSON body",
                operation=operation,
                activity_id=activity_id,
            ) from e

        try:
            activity = ActivitySummary.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                f"Activity update returned a malformed body ({e.error_count()} errors)",
                operation=operation,
                activity_id=activity_id,
            ) from e

        logger.info("activity_update_succeeded", activity_id=activity_id)
        return activity

    def _parse_activities(self, data: Any) -> List[ActivitySummary]:
        try:
            return _ACTIVITY_LIST.validate_python(data)
        except ValidationError as e:
            raise ParseError(
                f"Activity listing returned a malformed body ({e.error_count()} errors)",
                operation="list_activities",
            ) from e
