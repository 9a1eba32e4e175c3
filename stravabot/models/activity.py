from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class ActivityType(str, Enum):
    """Activity types the bot distinguishes; everything else is OTHER"""

    RIDE = "Ride"
    VIRTUAL_RIDE = "VirtualRide"
    RUN = "Run"
    OTHER = "Other"

    @classmethod
    def from_remote(cls, value: Optional[str]) -> "ActivityType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class ActivitySummary(BaseModel):
    """Activity summary as returned by the athlete activity listing"""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: int = Field(..., ge=0)
    name: str = ""
    activity_type: str = Field(..., alias="type")
    # Kept as the raw string; an unparsable value must not fail the listing
    start_date: str
    distance: float = Field(0.0, ge=0.0, description="Distance in meters")
    private: bool = False

    @property
    def kind(self) -> ActivityType:
        return ActivityType.from_remote(self.activity_type)

    def to_ref(self) -> "ActivityRef":
        return ActivityRef(id=self.id, name=self.name, start_date=self.start_date)


class ActivityRef(BaseModel):
    """Minimal reference to an activity inside a match"""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    start_date: str


class ActivityMatch(BaseModel):
    """An indoor duplicate paired with the virtual ride it duplicates"""

    model_config = ConfigDict(frozen=True)

    indoor_activity: ActivityRef
    virtual_ride: ActivityRef


class CleanupResult(BaseModel):
    """Outcome of one correlation cycle"""

    hidden: List[int] = Field(default_factory=list)
    matches: List[ActivityMatch] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class UpdateDetails(BaseModel):
    """Sparse activity update.

    Only fields that were explicitly set are sent; unset fields leave the
    remote value untouched.
    """

    hide_from_home: Optional[bool] = None
    name: Optional[str] = None
    description: Optional[str] = None
    commute: Optional[bool] = None
    trainer: Optional[bool] = None
    sport_type: Optional[str] = None
    gear_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
