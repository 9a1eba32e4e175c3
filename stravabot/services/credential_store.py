"""OAuth2 credential lifecycle.

CredentialStore holds the current token pair as an immutable snapshot and
answers whether a refresh is due. TokenRefresher performs the
refresh-token grant and swaps the snapshot in one step. Refreshes are
serialized, so at most one exchange is in flight at a time.
"""

import asyncio
import threading
import time
from typing import Callable, Optional

import aiohttp
import structlog
from pydantic import ValidationError

from stravabot.models.credential import Credential, TokenResponse
from stravabot.observability.events import CycleEvents
from stravabot.observability.metrics import API_REQUEST_DURATION, API_REQUESTS_TOTAL
from stravabot.utils.exceptions import AuthError

logger = structlog.get_logger()

DEFAULT_TOKEN_URL = "https://www.strava.com/oauth/token"
REFRESH_BUFFER_SECONDS = 300


class CredentialStore:
    """Current access/refresh token pair and its absolute expiry"""

    def __init__(
        self,
        refresh_token: str,
        access_token: str = "",
        expires_at: int = 0,
        refresh_buffer_seconds: int = REFRESH_BUFFER_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._credential = Credential(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> Credential:
        with self._lock:
            return self._credential

    def needs_refresh(self, now: Optional[float] = None) -> bool:
        """True when the token expires within the safety buffer"""
        if now is None:
            now = self._clock()
        return self.snapshot.expires_at - now < self.refresh_buffer_seconds

    def seconds_until_expiry(self, now: Optional[float] = None) -> float:
        if now is None:
            now = self._clock()
        return self.snapshot.expires_at - now

    def replace(self, credential: Credential) -> None:
        """Swap in a new credential snapshot"""
        with self._lock:
            previous = self._credential
            self._credential = credential

        if credential.expires_at < previous.expires_at:
            logger.warning(
                "token_expiry_moved_backwards",
                previous_expires_at=previous.expires_at,
                expires_at=credential.expires_at,
            )


class TokenRefresher:
    """Performs the refresh-token grant against the authorization endpoint"""

    def __init__(
        self,
        store: CredentialStore,
        client_id: str,
        client_secret: str,
        token_url: str = DEFAULT_TOKEN_URL,
        timeout_seconds: float = 10.0,
        events: Optional[CycleEvents] = None,
    ):
        self.store = store
        self.client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url
        self.timeout_seconds = timeout_seconds
        self.events = events or CycleEvents()
        self._refresh_lock = asyncio.Lock()

    async def get_valid_token(self) -> str:
        """Return an access token, refreshing first when it is expiring.

        Raises:
            AuthError: If the refresh exchange fails
        """
        if not self.store.needs_refresh():
            return self.store.snapshot.access_token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if self.store.needs_refresh():
                await self.refresh()

        return self.store.snapshot.access_token

    async def refresh(self) -> Credential:
        """Exchange the refresh token for a new credential.

        Raises:
            AuthError: On network error, timeout, non-2xx status or a
                malformed payload. Never retried here.
        """
        payload = {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "refresh_token": self.store.snapshot.refresh_token,
            "grant_type": "refresh_token",
        }

        logger.info("token_refresh_starting")

        try:
            with API_REQUEST_DURATION.labels(operation="token_refresh").time():
                async with aiohttp.ClientSession() as session:
                    async with session.post(
                        self.token_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                    ) as response:
                        API_REQUESTS_TOTAL.labels(
                            operation="token_refresh", status=str(response.status)
                        ).inc()

                        if not 200 <= response.status < 300:
                            raise AuthError(
                                f"Token refresh failed: HTTP {response.status}",
                                status=response.status,
                            )

                        data = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            API_REQUESTS_TOTAL.labels(operation="token_refresh", status="timeout").inc()
            raise AuthError("Token refresh timed out") from e
        except aiohttp.ClientError as e:
            API_REQUESTS_TOTAL.labels(operation="token_refresh", status="error").inc()
            raise AuthError(f"Token refresh request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise AuthError("Token refresh returned a non-JSON body") from e

        try:
            token = TokenResponse.model_validate(data)
        except ValidationError as e:
            raise AuthError(
                f"Token refresh returned a malformed payload ({e.error_count()} errors)"
            ) from e

        credential = Credential(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=token.expires_at,
        )
        self.store.replace(credential)
        self.events.token_refreshed(credential.expires_at)
        return credential
