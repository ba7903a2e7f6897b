"""
Result classes returned by the core.

Nothing in the core raises for bad geometry or policy violations; these
objects carry the outcome instead.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from ..models.point import GeoPoint, TurnDirection


@dataclass(frozen=True)
class PolygonMetricsResult:
    """
    Area and perimeter of a point sequence.

    Attributes:
        area_m2: Enclosed area in square meters
        perimeter_m: Perimeter in meters (closed when more than 2 points)
        method: "utm", "spherical" or "none" (fewer than 3 valid points)
        point_count: Number of valid points used
        within_valid_region: False when the spherical fallback was used
            outside its documented accuracy region
    """

    area_m2: float
    perimeter_m: float
    method: str
    point_count: int
    within_valid_region: bool = True

    @property
    def hectares(self) -> float:
        return self.area_m2 / 10_000.0

    @property
    def acres(self) -> float:
        return self.area_m2 * 0.000247105

    def to_dict(self) -> Dict[str, Any]:
        return {
            "areaSquareMeters": self.area_m2,
            "perimeterMeters": self.perimeter_m,
            "method": self.method,
            "pointCount": self.point_count,
            "withinValidRegion": self.within_valid_region,
        }


@dataclass(frozen=True)
class Deviation:
    """Angular deviation of a bearing from a reference line."""

    error: float
    direction: TurnDirection


@dataclass(frozen=True)
class CrossTrackError:
    """
    Perpendicular offset of a position from a directional line.

    Attributes:
        distance: Absolute offset in meters
        direction: Side of the line
        signed_offset: Offset in meters, positive to the right
    """

    distance: float
    direction: TurnDirection
    signed_offset: float = 0.0


@dataclass(frozen=True)
class LiveDeviation:
    """Live guidance for a position fix relative to the staking line."""

    reference_bearing: Optional[float]
    bearing_to_fix: float
    distance_to_fix: float
    collinearity: Deviation
    cross_track: CrossTrackError


@dataclass(frozen=True)
class Navigation:
    """Distance and bearing from a live fix to a target point."""

    target_id: str
    distance: float
    bearing: float


@dataclass(frozen=True)
class CollinearityRejection:
    """A strict-mode rejection: the point was not appended."""

    error: float
    tolerance: float
    direction: TurnDirection

    @property
    def message(self) -> str:
        return (
            f"Strict collinearity: point is {self.error:.1f}° off "
            f"(tolerance {self.tolerance:.1f}°), {self.direction.value.lower()} of line"
        )


@dataclass(frozen=True)
class AddPointOutcome:
    """
    Result of adding a point through the staking engine.

    Attributes:
        accepted: True when the point was appended
        point: The stored point (None when rejected)
        rejection: Why the point was rejected (None when accepted)
        established_bearing: Bearing newly established by this point, if any
    """

    accepted: bool
    point: Optional[GeoPoint] = None
    rejection: Optional[CollinearityRejection] = None
    established_bearing: Optional[float] = None

    @classmethod
    def rejected(cls, rejection: CollinearityRejection) -> "AddPointOutcome":
        return cls(accepted=False, rejection=rejection)
