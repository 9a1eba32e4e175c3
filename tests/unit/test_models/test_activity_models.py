"""Tests for activity models."""

import pytest
from pydantic import ValidationError

from stravabot.models.activity import (
    ActivityMatch,
    ActivitySummary,
    ActivityType,
    CleanupResult,
    UpdateDetails,
)


def summary(**overrides):
    data = {
        "id": 7,
        "name": "Lunch Ride",
        "type": "Ride",
        "start_date": "2025-03-01T12:00:00Z",
        "distance": 0,
        "private": False,
    }
    data.update(overrides)
    return ActivitySummary.model_validate(data)


class TestActivityType:
    def test_known_types(self):
        assert ActivityType.from_remote("Ride") is ActivityType.RIDE
        assert ActivityType.from_remote("VirtualRide") is ActivityType.VIRTUAL_RIDE
        assert ActivityType.from_remote("Run") is ActivityType.RUN

    def test_unknown_type_is_other(self):
        assert ActivityType.from_remote("Snowshoe") is ActivityType.OTHER
        assert ActivityType.from_remote(None) is ActivityType.OTHER


class TestActivitySummary:
    def test_type_alias(self):
        activity = summary(type="VirtualRide")
        assert activity.activity_type == "VirtualRide"
        assert activity.kind is ActivityType.VIRTUAL_RIDE

    def test_optional_fields_default(self):
        activity = ActivitySummary.model_validate(
            {"id": 1, "type": "Ride", "start_date": "2025-01-01T00:00:00Z"}
        )
        assert activity.distance == 0.0
        assert activity.private is False
        assert activity.name == ""

    def test_unparsable_start_date_is_kept(self):
        assert summary(start_date="yesterday").start_date == "yesterday"

    def test_negative_distance_rejected(self):
        with pytest.raises(ValidationError):
            summary(distance=-1)

    def test_frozen(self):
        activity = summary()
        with pytest.raises(ValidationError):
            activity.private = True

    def test_to_ref(self):
        ref = summary().to_ref()
        assert (ref.id, ref.name, ref.start_date) == (7, "Lunch Ride", "2025-03-01T12:00:00Z")


class TestUpdateDetails:
    def test_only_set_fields_in_payload(self):
        assert UpdateDetails(hide_from_home=True).to_payload() == {"hide_from_home": True}

    def test_empty_payload(self):
        assert UpdateDetails().to_payload() == {}

    def test_explicit_false_is_sent(self):
        payload = UpdateDetails(commute=False, gear_id="b123").to_payload()
        assert payload == {"commute": False, "gear_id": "b123"}


class TestCleanupResult:
    def test_to_dict(self):
        ride = summary()
        virtual = summary(id=8, type="VirtualRide", distance=20000)
        result = CleanupResult(
            hidden=[7],
            matches=[ActivityMatch(indoor_activity=ride.to_ref(), virtual_ride=virtual.to_ref())],
        )

        data = result.to_dict()

        assert data["hidden"] == [7]
        assert data["matches"][0]["indoor_activity"]["id"] == 7
        assert data["matches"][0]["virtual_ride"]["id"] == 8

    def test_defaults_are_independent(self):
        first = CleanupResult()
        first.hidden.append(1)
        assert CleanupResult().hidden == []
