import threading
from typing import Iterable, Set

import structlog

logger = structlog.get_logger()


class ProcessedMemory:
    """
    Activity ids already hidden by this process.

    Grows monotonically and lives for the process lifetime only; a restart
    starts from an empty set.
    """

    def __init__(self, initial: Iterable[int] = ()):
        self._ids: Set[int] = set(initial)
        self._lock = threading.Lock()

    def __contains__(self, activity_id: object) -> bool:
        with self._lock:
            return activity_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def add(self, activity_id: int) -> bool:
        """
        Record an activity id.

        Returns:
            True if the id was new, False if it was already recorded
        """
        with self._lock:
            if activity_id in self._ids:
                return False
            self._ids.add(activity_id)

        logger.debug("activity_marked_processed", activity_id=activity_id)
        return True

    def snapshot(self) -> frozenset:
        with self._lock:
            return frozenset(self._ids)
