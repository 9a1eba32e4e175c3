"""Bot assembly.

Wires the credential store, token refresher, activity client, processed
memory and correlator around one shared CycleEvents sink. The scheduled
job and the CLI both run cycles through StravaBot so they behave the same.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from stravabot.models.activity import CleanupResult
from stravabot.models.config import BotConfig
from stravabot.observability.events import CycleEvents
from stravabot.services.activities import StravaActivityClient
from stravabot.services.credential_store import CredentialStore, TokenRefresher
from stravabot.services.duplicate_correlator import DuplicateCorrelator
from stravabot.services.processed_memory import ProcessedMemory
from stravabot.utils.exceptions import CycleAbortedError

logger = structlog.get_logger()


class StravaBot:
    """Long-lived bot state shared across cycles"""

    def __init__(
        self,
        credentials: CredentialStore,
        refresher: TokenRefresher,
        correlator: DuplicateCorrelator,
    ):
        self.credentials = credentials
        self.refresher = refresher
        self.correlator = correlator

        self.last_cycle_at: Optional[datetime] = None
        self.last_cycle_ok: Optional[bool] = None
        self.last_error: Optional[str] = None
        self.last_result: Optional[CleanupResult] = None

    @classmethod
    def from_config(
        cls,
        config: BotConfig,
        events: Optional[CycleEvents] = None,
    ) -> "StravaBot":
        settings = config.settings
        events = events or CycleEvents()

        credentials = CredentialStore(
            refresh_token=config.strava.refresh_token.get_secret_value(),
            refresh_buffer_seconds=settings.refresh_buffer_seconds,
        )
        refresher = TokenRefresher(
            credentials,
            client_id=config.strava.client_id,
            client_secret=config.strava.client_secret.get_secret_value(),
            token_url=settings.token_url,
            timeout_seconds=settings.request_timeout_seconds,
            events=events,
        )
        client = StravaActivityClient(
            refresher,
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
        )
        correlator = DuplicateCorrelator(
            reader=client,
            mutator=client,
            memory=ProcessedMemory(),
            events=events,
            page=settings.page,
            page_size=settings.page_size,
            window_seconds=settings.match_window_seconds,
        )

        logger.info(
            "bot_initialized",
            page=settings.page,
            page_size=settings.page_size,
            match_window_seconds=settings.match_window_seconds,
        )
        return cls(credentials, refresher, correlator)

    @property
    def memory(self) -> ProcessedMemory:
        return self.correlator.memory

    async def run_cycle(self) -> CleanupResult:
        """Run one cycle and remember its outcome for health reporting"""
        self.last_cycle_at = datetime.now(timezone.utc)
        try:
            result = await self.correlator.run_cycle()
        except CycleAbortedError as e:
            self._record_failure(str(e), e.partial_result)
            raise
        except Exception as e:
            # Errors outside the remote calls carry no partial result
            self._record_failure(f"{type(e).__name__}: {e}", None)
            raise

        self.last_cycle_ok = True
        self.last_error = None
        self.last_result = result
        return result

    def _record_failure(self, error: str, partial: Optional[CleanupResult]) -> None:
        self.last_cycle_ok = False
        self.last_error = error
        self.last_result = partial

    def status(self) -> Dict[str, Any]:
        credential = self.credentials.snapshot
        return {
            "token_expires_at": credential.expires_at or None,
            "has_access_token": bool(credential.access_token),
            "processed_activities": len(self.memory),
            "last_cycle_at": (
                self.last_cycle_at.isoformat() if self.last_cycle_at else None
            ),
            "last_cycle_ok": self.last_cycle_ok,
            "last_error": self.last_error,
            "last_hidden": self.last_result.hidden if self.last_result else [],
        }
