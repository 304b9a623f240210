"""
Value types shared by the detection pipeline and its collaborators.

Every type here is a frozen dataclass created fresh for each detection call.
The two collaborator interfaces are expressed as :class:`typing.Protocol`
classes so real backends and test fakes can be swapped freely.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

import numpy as np

PLACEHOLDER_COLORS: Tuple[str, ...] = ("Silver", "Black", "White")

CONFIDENCE_NO_CAR = 0.0
CONFIDENCE_CAR_DETECTED = 0.7
CONFIDENCE_COMPLETE = 0.8


@dataclass(frozen=True)
class Location:
    """Latitude/longitude pair supplied by the caller."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")

    def formatted(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class Rectangle:
    """A rectangle returned by a detector, in normalized image coordinates."""

    bbox: Tuple[float, float, float, float]
    confidence: float = 1.0

    @property
    def width(self) -> float:
        return self.bbox[2]

    @property
    def height(self) -> float:
        return self.bbox[3]

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class TextCandidate:
    """A single piece of text returned by a recognizer."""

    text: str
    confidence: float = 1.0
    bbox: Optional[Tuple[float, float, float, float]] = None


@dataclass(frozen=True)
class CarFeatures:
    """
    Coarse features used to guess a car's make and model.

    ``headlight_count`` is the raw number of rectangles the detector returned,
    with none of the area/confidence filtering used for car detection.
    ``dominant_colors`` is a fixed placeholder and is not derived from pixels.
    """

    grille_area: float
    headlight_count: int
    body_proportions: float
    dominant_colors: Tuple[str, ...] = PLACEHOLDER_COLORS


@dataclass(frozen=True)
class ResultRecord:
    """Outcome of one pipeline run, consumed by the presentation layer."""

    car_detected: bool
    timestamp: datetime
    confidence: float
    license_plate: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    location: Optional[Location] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")
        identified = (self.license_plate, self.make, self.model)
        if not self.car_detected and any(value is not None for value in identified):
            raise ValueError("Plate, make and model must be empty when no car is detected.")

    def with_location(self, location: Optional[Location]) -> "ResultRecord":
        """Return a copy of the record carrying ``location``."""
        return replace(self, location=location)

    @property
    def confidence_percent(self) -> int:
        return int(self.confidence * 100)

    @property
    def confidence_level(self) -> str:
        if self.confidence >= 0.8:
            return "high"
        if self.confidence >= 0.5:
            return "medium"
        return "low"

    @property
    def formatted_timestamp(self) -> str:
        """Medium date and short time, e.g. ``May 1, 2024 at 2:05 PM``."""
        ts = self.timestamp
        clock = f"{ts:%I:%M %p}".lstrip("0")
        return f"{ts:%b} {ts.day}, {ts.year} at {clock}"

    @property
    def formatted_location(self) -> Optional[str]:
        return self.location.formatted() if self.location else None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation of the record."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class RectangleDetector(Protocol):
    """Finds rectangular shapes in an image."""

    def detect(self, image: np.ndarray) -> Sequence[Rectangle]:
        ...


class TextRecognizer(Protocol):
    """Reads text from an image, best candidates first."""

    def recognize(self, image: np.ndarray) -> Sequence[TextCandidate]:
        ...
