"""
Indoor ride duplicate correlation.

A trainer session recorded twice shows up as a zero-distance "Ride" plus a
"VirtualRide" starting around the same time. Each cycle:
1. Fetch one page of recent activities
2. Pick indoor-duplicate candidates (public, zero-distance rides not yet processed)
3. Pair each with the first virtual ride, in listing order, starting within the window
4. Hide the indoor duplicate and remember its id
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from stravabot.models.activity import (
    ActivityMatch,
    ActivitySummary,
    ActivityType,
    CleanupResult,
    UpdateDetails,
)
from stravabot.observability.events import CycleEvents
from stravabot.services.activities.base import ActivityMutator, ActivityReader
from stravabot.services.processed_memory import ProcessedMemory
from stravabot.utils.exceptions import CycleAbortedError, StravaBotError

logger = structlog.get_logger()

MATCH_WINDOW_SECONDS = 3600
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 200


def parse_start_time(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 start time; None if it cannot be parsed.

    A timestamp without an offset is read as UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_indoor_duplicate(activity: ActivitySummary) -> bool:
    """A standard ride with zero distance"""
    return activity.kind == ActivityType.RIDE and activity.distance == 0


def is_virtual_ride(activity: ActivitySummary) -> bool:
    return activity.kind == ActivityType.VIRTUAL_RIDE


def within_window(
    first: ActivitySummary,
    second: ActivitySummary,
    window_seconds: int = MATCH_WINDOW_SECONDS,
) -> bool:
    """True if both start times parse and lie at most window_seconds apart"""
    first_start = parse_start_time(first.start_date)
    second_start = parse_start_time(second.start_date)
    if first_start is None or second_start is None:
        return False
    return abs((first_start - second_start).total_seconds()) <= window_seconds


class DuplicateCorrelator:
    """
    Finds and hides indoor ride duplicates.

    Not safe for overlapping invocations; the scheduler runs at most one
    cycle at a time.
    """

    def __init__(
        self,
        reader: ActivityReader,
        mutator: ActivityMutator,
        memory: Optional[ProcessedMemory] = None,
        events: Optional[CycleEvents] = None,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
        window_seconds: int = MATCH_WINDOW_SECONDS,
    ):
        self.reader = reader
        self.mutator = mutator
        self.memory = memory if memory is not None else ProcessedMemory()
        self.events = events or CycleEvents()
        self.page = page
        self.page_size = page_size
        self.window_seconds = window_seconds

    def is_candidate(self, activity: ActivitySummary) -> bool:
        """Indoor duplicate that is public and not handled yet"""
        return (
            is_indoor_duplicate(activity)
            and not activity.private
            and activity.id not in self.memory
        )

    def find_match(
        self,
        indoor: ActivitySummary,
        virtual_rides: List[ActivitySummary],
    ) -> Optional[ActivitySummary]:
        """First virtual ride in listing order within the window.

        Listing order decides, not temporal proximity, and a virtual ride
        may be matched by more than one indoor candidate.
        """
        for virtual in virtual_rides:
            if within_window(indoor, virtual, self.window_seconds):
                return virtual
        return None

    async def run_cycle(self) -> CleanupResult:
        """
        Run one correlation cycle.

        Returns:
            CleanupResult with hidden ids and matched pairs

        Raises:
            CycleAbortedError: If any remote call fails. Activities hidden
                earlier in the cycle stay hidden and remain in memory.
        """
        result = CleanupResult()

        try:
            activities = await self.reader.list_activities(self.page, self.page_size)
        except StravaBotError as e:
            raise self._abort(e, "list_activities", result) from e

        self.events.page_fetched(self.page, len(activities))

        candidates = [a for a in activities if self.is_candidate(a)]
        virtual_rides = [a for a in activities if is_virtual_ride(a)]

        logger.info(
            "candidates_classified",
            indoor_candidates=len(candidates),
            virtual_rides=len(virtual_rides),
        )

        for indoor in candidates:
            virtual = self.find_match(indoor, virtual_rides)
            if virtual is None:
                logger.debug("no_virtual_ride_match", activity_id=indoor.id)
                continue

            try:
                await self.mutator.update(indoor.id, UpdateDetails(hide_from_home=True))
            except StravaBotError as e:
                raise self._abort(
                    e, "update_activity", result, activity_id=indoor.id
                ) from e

            match = ActivityMatch(
                indoor_activity=indoor.to_ref(),
                virtual_ride=virtual.to_ref(),
            )
            result.matches.append(match)
            result.hidden.append(indoor.id)
            self.memory.add(indoor.id)
            self.events.activity_hidden(match, len(self.memory))

        self.events.cycle_completed(result)
        return result

    def _abort(
        self,
        error: StravaBotError,
        default_operation: str,
        result: CleanupResult,
        activity_id: Optional[int] = None,
    ) -> CycleAbortedError:
        """Report a failed remote call and build the abort error"""
        operation = getattr(error, "operation", default_operation)
        self.events.operation_failed(
            operation,
            error,
            activity_id=activity_id,
            status=getattr(error, "status", None),
        )
        self.events.cycle_failed(operation, len(result.hidden))
        return CycleAbortedError(
            operation,
            partial_result=result,
            activity_id=activity_id,
            reason=str(error),
        )
