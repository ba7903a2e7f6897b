"""field_survey.core.geodesy.primitives

Spherical-earth primitives for field measurement.

Conventions:
  - Coordinates: latitude/longitude in degrees (WGS84)
  - Bearing: North = 0, clockwise positive, degrees in [0, 360)
  - Distance: meters on a sphere of radius 6,371,000 m

Every function here is total: NaN or non-finite input degrades to a neutral
value (0 or "-") instead of propagating into exported data.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Tuple


EARTH_RADIUS_M = 6_371_000.0

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

SQ_M_PER_HECTARE = 10_000.0
ACRES_PER_SQ_M = 0.000247105


def _finite(*values: float) -> bool:
    """True when every value is a finite real number."""
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False


def distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters using the haversine formula."""
    if not _finite(lat1, lng1, lat2, lng2):
        return 0.0

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push `a` slightly outside [0, 1]
    a = max(0.0, min(1.0, a))

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    d = EARTH_RADIUS_M * c
    return 0.0 if math.isnan(d) else d


def bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Initial bearing from point 1 to point 2 in degrees, [0, 360)."""
    if not _finite(lat1, lng1, lat2, lng2):
        return 0.0

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    theta = math.atan2(y, x)
    return normalize_angle(math.degrees(theta))


def normalize_angle(angle: float) -> float:
    """Reduce any angle in degrees to [0, 360)."""
    if not _finite(angle):
        return 0.0
    # Python's floored modulo already takes the sign of the divisor
    a = angle % 360.0
    # -1e-20 % 360 evaluates to 360.0 in floating point
    if a >= 360.0:
        a = 0.0
    return a


def signed_angle_difference(angle: float, reference: float) -> float:
    """Difference ``angle - reference`` normalized to (-180, 180]."""
    if not _finite(angle, reference):
        return 0.0
    diff = normalize_angle(angle - reference)
    if diff > 180.0:
        diff -= 360.0
    return diff


def format_bearing(angle: float) -> str:
    """Format a bearing as ``"<cardinal> <deg>°<min>'"``.

    The cardinal is one of 16 compass points; degrees and minutes are
    truncated, never rounded.
    """
    if not _finite(angle):
        return "-"
    angle = normalize_angle(angle)
    index = int(math.floor(angle / 22.5 + 0.5)) % 16
    degrees = int(math.floor(angle))
    minutes = int(math.floor((angle - degrees) * 60))
    return f"{COMPASS_POINTS[index]} {degrees}°{minutes}'"


def square_meters_to_hectares(sq_meters: float) -> float:
    return sq_meters / SQ_M_PER_HECTARE if _finite(sq_meters) else 0.0


def square_meters_to_acres(sq_meters: float) -> float:
    return sq_meters * ACRES_PER_SQ_M if _finite(sq_meters) else 0.0


def format_area(sq_meters: float) -> str:
    """Human-readable area: m² up to one hectare, hectares above."""
    if not _finite(sq_meters):
        return "0 m²"
    if sq_meters > SQ_M_PER_HECTARE:
        return f"{square_meters_to_hectares(sq_meters):.3f} ha"
    return f"{sq_meters:.1f} m²"


def format_acres(sq_meters: float) -> str:
    if not _finite(sq_meters):
        return "0 ac"
    return f"{square_meters_to_acres(sq_meters):.3f} ac"


def format_distance(meters: float) -> str:
    """Meters with one decimal, switching to km beyond 1000 m."""
    if not _finite(meters):
        return "0.0 m"
    if meters >= 1000.0:
        return f"{meters / 1000.0:.3f} km"
    return f"{meters:.1f} m"


_COORD_QUERY = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


def parse_coordinate_query(text: str) -> Optional[Tuple[float, float]]:
    """Parse ``"lat, lng"`` search text into a coordinate pair.

    Returns None when the text is not a coordinate pair or is out of range.
    """
    if not text:
        return None
    match = _COORD_QUERY.match(text)
    if match is None:
        return None
    lat = float(match.group(1))
    lng = float(match.group(2))
    if -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0:
        return lat, lng
    return None
