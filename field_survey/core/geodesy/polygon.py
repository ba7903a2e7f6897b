"""field_survey.core.geodesy.polygon

Area and perimeter of an ordered point sequence.

Two area paths exist and exactly one is used per call:

- planar: every point is projected with a true projection into the frame
  (zone/hemisphere) of the first point, then the shoelace formula is applied;
- spherical: a local tangent plane is built around the first point from
  haversine distances along its parallel and meridian, then the shoelace
  formula is applied.

The spherical path is only accurate for small, non-polar surveys. Results
outside ``FALLBACK_MAX_EXTENT_M`` / ``FALLBACK_MAX_ABS_LAT`` are still
returned but flagged ``within_valid_region=False``.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .primitives import distance
from .projection import Projector
from ..models.point import GeoPoint
from ..results.outcomes import PolygonMetricsResult

logger = logging.getLogger(__name__)


FALLBACK_MAX_EXTENT_M = 10_000.0
FALLBACK_MAX_ABS_LAT = 80.0

METHOD_PLANAR = "utm"
METHOD_SPHERICAL = "spherical"
METHOD_NONE = "none"


def shoelace_area(xy: Sequence[Tuple[float, float]]) -> float:
    """Signed shoelace area of a planar ring (not closed explicitly).

    Counter-clockwise rings are positive. Fewer than 3 vertices give 0.
    """
    if len(xy) < 3:
        return 0.0
    arr = np.asarray(xy, dtype=float)
    x = arr[:, 0]
    y = arr[:, 1]
    s = float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)) / 2.0
    return s if math.isfinite(s) else 0.0


def local_tangent_plane(points: Sequence[GeoPoint]) -> List[Tuple[float, float]]:
    """Local x/y in meters relative to the first point.

    x is the haversine distance along the origin's parallel, y along its
    meridian, each signed by the coordinate difference.
    """
    if not points:
        return []
    origin = points[0]
    xy = []
    for p in points:
        x = distance(origin.lat, origin.lng, origin.lat, p.lng)
        y = distance(origin.lat, origin.lng, p.lat, origin.lng)
        xy.append((x if p.lng > origin.lng else -x, y if p.lat > origin.lat else -y))
    return xy


def _valid(points: Iterable[GeoPoint]) -> List[GeoPoint]:
    return [p for p in points if p.is_valid]


class PolygonMetrics:
    """Computes area/perimeter with a projector chosen at construction.

    Args:
        projector: A projector; when it is not a true projection (or None),
            area always uses the spherical path.
    """

    def __init__(self, projector: Optional[Projector] = None):
        self.projector = projector

    @property
    def uses_projection(self) -> bool:
        return self.projector is not None and self.projector.is_true_projection

    # ------------------------------------------------------------------
    # Area
    # ------------------------------------------------------------------

    def _planar_xy(self, points: Sequence[GeoPoint]) -> Optional[List[Tuple[float, float]]]:
        """Project all points in the first point's frame; None if any fails."""
        first = self.projector.to_planar(points[0].lat, points[0].lng)
        if not first.ok:
            return None
        xy = []
        for p in points:
            c = self.projector.to_planar(p.lat, p.lng, zone=first.zone, hemisphere=first.hemisphere)
            if not c.ok:
                return None
            xy.append((c.easting, c.northing))
        return xy

    def _area_with_method(self, points: Sequence[GeoPoint]) -> Tuple[float, str, bool]:
        valid = _valid(points)
        if len(valid) < 3:
            return 0.0, METHOD_NONE, True

        if self.uses_projection:
            xy = self._planar_xy(valid)
            if xy is not None:
                return abs(shoelace_area(xy)), METHOD_PLANAR, True
            logger.warning("Projection failed for part of the polygon; using spherical area")

        xy = local_tangent_plane(valid)
        area = abs(shoelace_area(xy))
        in_region = self._within_fallback_region(valid, xy)
        if not in_region:
            logger.warning(
                "Spherical area over %d points exceeds the fallback valid region "
                "(extent <= %.0f m, |lat| <= %.0f); result is approximate",
                len(valid), FALLBACK_MAX_EXTENT_M, FALLBACK_MAX_ABS_LAT,
            )
        return area, METHOD_SPHERICAL, in_region

    @staticmethod
    def _within_fallback_region(points: Sequence[GeoPoint], xy: Sequence[Tuple[float, float]]) -> bool:
        if any(abs(p.lat) > FALLBACK_MAX_ABS_LAT for p in points):
            return False
        arr = np.asarray(xy, dtype=float)
        extent = max(float(np.ptp(arr[:, 0])), float(np.ptp(arr[:, 1])))
        return extent <= FALLBACK_MAX_EXTENT_M

    def area(self, points: Sequence[GeoPoint]) -> float:
        """Enclosed area in square meters; 0 for fewer than 3 valid points."""
        return self._area_with_method(points)[0]

    # ------------------------------------------------------------------
    # Perimeter
    # ------------------------------------------------------------------

    def perimeter(self, points: Sequence[GeoPoint]) -> float:
        """Sum of edge lengths, closed back to the first point when n > 2."""
        valid = _valid(points)
        if len(valid) < 2:
            return 0.0
        total = sum(
            distance(a.lat, a.lng, b.lat, b.lng) for a, b in zip(valid[:-1], valid[1:])
        )
        if len(valid) > 2:
            total += distance(valid[-1].lat, valid[-1].lng, valid[0].lat, valid[0].lng)
        return total if math.isfinite(total) else 0.0

    def measure(self, points: Sequence[GeoPoint]) -> PolygonMetricsResult:
        """Area and perimeter together, with the area method used."""
        points = list(points)
        area, method, in_region = self._area_with_method(points)
        return PolygonMetricsResult(
            area_m2=area,
            perimeter_m=self.perimeter(points),
            method=method,
            point_count=len(_valid(points)),
            within_valid_region=in_region,
        )
