from datetime import datetime, timezone

import pytest

from carrecognition.models import Location, Rectangle, ResultRecord

NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def test_rectangle_area():
    assert Rectangle(bbox=(0.1, 0.1, 0.5, 0.4)).area == pytest.approx(0.2)


def test_no_car_record_rejects_identification_fields():
    with pytest.raises(ValueError):
        ResultRecord(car_detected=False, timestamp=NOW, confidence=0.0, make="Ford")


def test_confidence_must_be_in_range():
    with pytest.raises(ValueError):
        ResultRecord(car_detected=True, timestamp=NOW, confidence=1.5)


def test_location_bounds():
    with pytest.raises(ValueError):
        Location(latitude=91.0, longitude=0.0)
    with pytest.raises(ValueError):
        Location(latitude=0.0, longitude=-181.0)


def test_with_location_keeps_other_fields():
    record = ResultRecord(car_detected=True, timestamp=NOW, confidence=0.8, license_plate="ABC123")
    located = record.with_location(Location(37.7749, -122.4194))

    assert located.location == Location(37.7749, -122.4194)
    assert located.timestamp == record.timestamp
    assert located.license_plate == "ABC123"
    assert record.location is None


def test_display_helpers():
    record = ResultRecord(
        car_detected=True,
        timestamp=NOW,
        confidence=0.8,
        location=Location(37.7749, -122.4194),
    )
    assert record.confidence_percent == 80
    assert record.confidence_level == "high"
    assert record.formatted_location == "37.7749, -122.4194"


@pytest.mark.parametrize("confidence, level", [(0.8, "high"), (0.7, "medium"), (0.5, "medium"), (0.0, "low")])
def test_confidence_levels(confidence, level):
    record = ResultRecord(car_detected=confidence > 0, timestamp=NOW, confidence=confidence)
    assert record.confidence_level == level


def test_to_dict_is_json_friendly():
    record = ResultRecord(
        car_detected=True,
        timestamp=NOW,
        confidence=0.8,
        make="Ford",
        model="Focus",
        location=Location(1.5, 2.5),
    )
    data = record.to_dict()
    assert data["timestamp"] == "2024-05-01T12:30:00+00:00"
    assert data["location"] == {"latitude": 1.5, "longitude": 2.5}
    assert data["license_plate"] is None


@pytest.mark.parametrize("field", ["license_plate", "make", "model"])
def test_no_car_record_rejects_empty_strings(field):
    with pytest.raises(ValueError):
        ResultRecord(car_detected=False, timestamp=NOW, confidence=0.0, **{field: ""})


@pytest.mark.parametrize(
    "timestamp, expected",
    [
        (NOW, "May 1, 2024 at 12:30 PM"),
        (datetime(2023, 11, 9, 9, 5, tzinfo=timezone.utc), "Nov 9, 2023 at 9:05 AM"),
    ],
)
def test_formatted_timestamp(timestamp, expected):
    record = ResultRecord(car_detected=False, timestamp=timestamp, confidence=0.0)
    assert record.formatted_timestamp == expected
