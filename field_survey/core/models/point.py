"""
GeoPoint class for field surveys.

Conventions:
- Coordinates: latitude/longitude in degrees (WGS84)
- Units: Meters for altitude, accuracy and distances; degrees for bearings
- Timestamps: Milliseconds since the Unix epoch
- Point IDs: String type (legacy numeric IDs are converted at import)
"""

import math
import time
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Dict, Any


class PointKind(Enum):
    """How a point entered the survey."""
    GPS = "GPS"
    MANUAL = "MANUAL"
    STAKING = "STAKING"
    INTERMEDIATE = "INTERMEDIATE"
    CORNER = "CORNER"


class TurnDirection(Enum):
    """Side of the reference line a point or fix falls on."""
    LEFT = "Left"
    RIGHT = "Right"


def new_point_id() -> str:
    """Generate a unique point identifier."""
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class GeoPoint:
    """
    A captured survey point.

    Points are immutable; edits produce new instances through :meth:`evolve`.
    The sequence-dependent fields (bearing, distance, collinearity_error,
    turn_direction) are relative to the point's predecessor in its
    PointSequence and are re-derived by the sequence.

    A point with coordinates outside the valid range can be constructed
    (legacy data) but reports ``is_valid == False`` and is excluded from
    every metric.

    Attributes:
        id: Unique identifier
        lat: Latitude in degrees
        lng: Longitude in degrees
        kind: How the point was captured
        timestamp: Capture time (ms since epoch)
        altitude: Altitude in meters, None if unknown
        accuracy: Horizontal accuracy (1-sigma, meters), None if unknown
        label: Short display label (e.g. "A", "M1", "S2")
        name: Optional free-text name
        bearing: Bearing from the previous point (degrees)
        distance: Distance from the previous point (meters)
        collinearity_error: Deviation from the staking line (degrees)
        turn_direction: Side of the staking line
        is_snapped: True when the position was projected onto a baseline
    """

    id: str
    lat: float
    lng: float
    kind: PointKind = PointKind.MANUAL
    timestamp: int = 0
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    label: Optional[str] = None
    name: Optional[str] = None
    bearing: Optional[float] = None
    distance: Optional[float] = None
    collinearity_error: Optional[float] = None
    turn_direction: Optional[TurnDirection] = None
    is_snapped: bool = False

    def __post_init__(self):
        """Validate point data after initialization."""
        if not self.id:
            raise ValueError("Point ID cannot be empty")
        if not isinstance(self.id, str):
            raise ValueError("Point ID must be a string")

        object.__setattr__(self, "lat", float(self.lat))
        object.__setattr__(self, "lng", float(self.lng))

        if isinstance(self.kind, str):
            object.__setattr__(self, "kind", PointKind(self.kind.upper()))
        if isinstance(self.turn_direction, str):
            object.__setattr__(self, "turn_direction", TurnDirection(self.turn_direction.capitalize()))

        if self.accuracy is not None and self.accuracy < 0:
            raise ValueError("accuracy cannot be negative")

    @classmethod
    def create(
        cls,
        lat: float,
        lng: float,
        kind: PointKind = PointKind.MANUAL,
        **kwargs: Any,
    ) -> "GeoPoint":
        """Create a new point with a fresh id and the current timestamp."""
        kwargs.setdefault("id", new_point_id())
        kwargs.setdefault("timestamp", now_ms())
        return cls(lat=lat, lng=lng, kind=kind, **kwargs)

    @property
    def is_valid(self) -> bool:
        """True when latitude/longitude are finite and in range."""
        return (
            math.isfinite(self.lat) and math.isfinite(self.lng)
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lng <= 180.0
        )

    def evolve(self, **changes: Any) -> "GeoPoint":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize point to dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "type": self.kind.value,
            "timestamp": self.timestamp,
            "altitude": self.altitude,
            "accuracy": self.accuracy,
            "label": self.label,
            "name": self.name,
            "bearing": self.bearing,
            "distance": self.distance,
            "collinearityError": self.collinearity_error,
            "turnDirection": self.turn_direction.value if self.turn_direction else None,
            "isSnapped": self.is_snapped,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoPoint":
        """
        Create a GeoPoint from a strict dictionary (as written by :meth:`to_dict`).

        Loosely-typed legacy data goes through
        :func:`field_survey.io.normalize.normalize_point` instead.

        Raises:
            KeyError: If required fields are missing
            ValueError: If data is invalid
        """
        turn = data.get("turnDirection")
        return cls(
            id=str(data["id"]),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            kind=PointKind(data.get("type", PointKind.MANUAL.value)),
            timestamp=int(data.get("timestamp") or 0),
            altitude=data.get("altitude"),
            accuracy=data.get("accuracy"),
            label=data.get("label"),
            name=data.get("name"),
            bearing=data.get("bearing"),
            distance=data.get("distance"),
            collinearity_error=data.get("collinearityError"),
            turn_direction=TurnDirection(turn) if turn else None,
            is_snapped=bool(data.get("isSnapped", False)),
        )

    def __repr__(self) -> str:
        """Return string representation of the point."""
        tag = self.label or self.id[:8]
        return f"GeoPoint({tag}, lat={self.lat:.7f}, lng={self.lng:.7f}, {self.kind.value})"
