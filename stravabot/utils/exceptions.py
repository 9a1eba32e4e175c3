"""Exception hierarchy for the duplicate cleanup bot.

- Base exception for all bot errors
- Specific exceptions for each remote operation (token refresh, listing, update)
- Cycle-level abort error carrying the partial progress of the cycle

All exceptions inherit from StravaBotError so the scheduler can catch every
bot-related failure in a single except block. Messages carry operation,
activity id and HTTP status but never token values.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from stravabot.models.activity import CleanupResult


class StravaBotError(Exception):
    """Base exception for all bot errors

    Use this to catch any error raised while running a cycle:
    ```python
    try:
        await bot.run_cycle()
    except StravaBotError as e:
        logger.error("cycle_failed", error=str(e))
    ```
    """

    pass


class AuthError(StravaBotError):
    """Refresh-token exchange failed

    Raised when:
    - The token endpoint is unreachable or times out
    - The token endpoint returns a non-2xx status (revoked or invalid token)
    - The token payload is missing required fields

    Never retried at this layer.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.operation = "token_refresh"
        self.status = status


class TransportError(StravaBotError):
    """Listing or update request failed

    Raised when:
    - Network error or timeout
    - Non-success HTTP status
    """

    def __init__(
        self,
        message: str,
        operation: str,
        status: Optional[int] = None,
        activity_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status = status
        self.activity_id = activity_id


class UpdateError(TransportError):
    """Non-success response to an activity update

    The corresponding activity must be treated as not mutated.
    """

    def __init__(
        self,
        message: str,
        activity_id: int,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            operation="update_activity",
            status=status,
            activity_id=activity_id,
        )


class ParseError(StravaBotError):
    """Response body did not match the expected shape

    Propagated exactly like TransportError.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        activity_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.activity_id = activity_id


class CycleAbortedError(StravaBotError):
    """A remote call failed and the current cycle stopped

    Activities hidden before the failure stay hidden and stay recorded in
    processed memory; they are listed in ``partial_result``. The underlying
    error is available as ``__cause__``.
    """

    def __init__(
        self,
        operation: str,
        partial_result: "CleanupResult",
        activity_id: Optional[int] = None,
        reason: str = "",
    ) -> None:
        message = f"Cycle aborted during {operation}"
        if activity_id is not None:
            message += f" (activity {activity_id})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.operation = operation
        self.activity_id = activity_id
        self.partial_result = partial_result
