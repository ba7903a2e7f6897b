"""field_survey.core.geodesy.projection

Planar (easting/northing) projection of geographic coordinates.

Two projector variants share one interface and are chosen once, when the
projector is built:

- :class:`TrueProjection`: UTM on the WGS84 datum through pyproj.
- :class:`ApproximateFallback`: fixed equirectangular scaling
  (``lng * 111320``, ``lat * 110574``). Approximate but monotonic and stable.

Neither variant raises. A failed projection returns a zeroed
:class:`PlanarCoordinate` with ``ok=False`` so callers can fall back.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

logger = logging.getLogger(__name__)


METERS_PER_DEGREE_LNG = 111_320.0
METERS_PER_DEGREE_LAT = 110_574.0

PROJECTION_UTM = "utm"
PROJECTION_APPROXIMATE = "approximate"


@dataclass(frozen=True)
class PlanarCoordinate:
    """
    A projected coordinate.

    Attributes:
        easting: X in meters
        northing: Y in meters
        zone: UTM zone number (0 for the approximate projection)
        hemisphere: "N" or "S"
        ok: False when the projection failed and easting/northing are zeroed
    """

    easting: float
    northing: float
    zone: int
    hemisphere: str
    ok: bool = True

    @classmethod
    def failed(cls, zone: int = 0, hemisphere: str = "N") -> "PlanarCoordinate":
        return cls(easting=0.0, northing=0.0, zone=zone, hemisphere=hemisphere, ok=False)


def utm_zone(lng: float) -> int:
    """UTM zone number for a longitude, ``floor((lng + 180) / 6) + 1``.

    Longitude 180 lands in zone 60 rather than a nonexistent zone 61.
    """
    zone = int(math.floor((lng + 180.0) / 6.0)) + 1
    return max(1, min(60, zone))


def hemisphere_of(lat: float) -> str:
    return "N" if lat >= 0 else "S"


def _is_valid_latlng(lat: float, lng: float) -> bool:
    return (
        math.isfinite(lat) and math.isfinite(lng)
        and -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
    )


class Projector(ABC):
    """Converts latitude/longitude to a local planar frame."""

    #: True for a real map projection, False for the approximate scaling.
    is_true_projection: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier of the projection variant."""

    @abstractmethod
    def to_planar(
        self,
        lat: float,
        lng: float,
        zone: Optional[int] = None,
        hemisphere: Optional[str] = None,
    ) -> PlanarCoordinate:
        """Project a coordinate.

        Args:
            lat: Latitude in degrees
            lng: Longitude in degrees
            zone: Force this zone instead of deriving it from ``lng``
            hemisphere: Force "N" or "S" instead of deriving it from ``lat``
        """


class TrueProjection(Projector):
    """UTM/WGS84 projection backed by pyproj.

    Transformers are built lazily and cached per (zone, hemisphere).
    """

    is_true_projection = True

    def __init__(self) -> None:
        self._transformers: Dict[Tuple[int, str], Transformer] = {}

    @property
    def name(self) -> str:
        return PROJECTION_UTM

    def _transformer(self, zone: int, hemisphere: str) -> Transformer:
        key = (zone, hemisphere)
        transformer = self._transformers.get(key)
        if transformer is None:
            proj = f"+proj=utm +zone={zone} +datum=WGS84 +units=m +no_defs"
            if hemisphere == "S":
                proj += " +south"
            transformer = Transformer.from_crs(
                CRS.from_epsg(4326), CRS.from_proj4(proj), always_xy=True
            )
            self._transformers[key] = transformer
        return transformer

    def to_planar(
        self,
        lat: float,
        lng: float,
        zone: Optional[int] = None,
        hemisphere: Optional[str] = None,
    ) -> PlanarCoordinate:
        if not _is_valid_latlng(lat, lng):
            return PlanarCoordinate.failed()

        zone = utm_zone(lng) if zone is None else zone
        hemisphere = hemisphere_of(lat) if hemisphere is None else hemisphere

        try:
            easting, northing = self._transformer(zone, hemisphere).transform(lng, lat)
        except (CRSError, ProjError, ValueError) as exc:
            logger.warning("UTM projection failed for (%s, %s) in zone %s%s: %s",
                           lat, lng, zone, hemisphere, exc)
            return PlanarCoordinate.failed(zone, hemisphere)

        if not (math.isfinite(easting) and math.isfinite(northing)):
            return PlanarCoordinate.failed(zone, hemisphere)

        return PlanarCoordinate(
            easting=float(easting),
            northing=float(northing),
            zone=zone,
            hemisphere=hemisphere,
        )


class ApproximateFallback(Projector):
    """Equirectangular degree scaling; used when no true projection is wanted."""

    is_true_projection = False

    @property
    def name(self) -> str:
        return PROJECTION_APPROXIMATE

    def to_planar(
        self,
        lat: float,
        lng: float,
        zone: Optional[int] = None,
        hemisphere: Optional[str] = None,
    ) -> PlanarCoordinate:
        if not _is_valid_latlng(lat, lng):
            return PlanarCoordinate.failed()
        return PlanarCoordinate(
            easting=lng * METERS_PER_DEGREE_LNG,
            northing=lat * METERS_PER_DEGREE_LAT,
            zone=0,
            hemisphere=hemisphere_of(lat) if hemisphere is None else hemisphere,
        )


def make_projector(kind: str = PROJECTION_UTM) -> Projector:
    """Build the projector variant named by ``kind`` ("utm" or "approximate")."""
    kind_l = (kind or "").strip().lower()
    if kind_l == PROJECTION_UTM:
        return TrueProjection()
    if kind_l == PROJECTION_APPROXIMATE:
        return ApproximateFallback()
    raise ValueError(f"Unknown projection: {kind}")
