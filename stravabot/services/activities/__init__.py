from stravabot.services.activities.base import ActivityMutator, ActivityReader
from stravabot.services.activities.strava import StravaActivityClient

__all__ = ["ActivityReader", "ActivityMutator", "StravaActivityClient"]
