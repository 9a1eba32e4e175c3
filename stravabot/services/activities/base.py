from abc import ABC, abstractmethod
from typing import List

from stravabot.models.activity import ActivitySummary, UpdateDetails

MAX_PAGE_SIZE = 200


class ActivityReader(ABC):
    """Paginated listing of the athlete's activities"""

    @abstractmethod
    async def list_activities(self, page: int, page_size: int) -> List[ActivitySummary]:
        """List one page of activities, most recent first

        Args:
            page: Page number (1-indexed)
            page_size: Activities per page (1..=200)

        Returns:
            Activity summaries in remote order

        Raises:
            AuthError: If a token refresh was needed and failed
            TransportError: If the request fails or returns non-success
            ParseError: If the body is not a list of activity summaries
        """
        pass


class ActivityMutator(ABC):
    """Partial update of a single remote activity"""

    @abstractmethod
    async def update(self, activity_id: int, details: UpdateDetails) -> ActivitySummary:
        """Apply a sparse update

        Args:
            activity_id: Remote activity id
            details: Fields to set; unset fields are left untouched

        Returns:
            The updated activity summary

        Raises:
            AuthError: If a token refresh was needed and failed
            UpdateError: If the remote returns a non-success status
            TransportError: On network error or timeout
            ParseError: If the body is not an activity summary
        """
        pass


def validate_page_params(page: int, page_size: int) -> None:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")
