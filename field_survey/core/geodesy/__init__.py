"""Geodetic primitives, planar projection and polygon metrics."""

from .primitives import (
    EARTH_RADIUS_M,
    distance,
    bearing,
    normalize_angle,
    signed_angle_difference,
    format_bearing,
    format_area,
    format_acres,
    format_distance,
    parse_coordinate_query,
)
from .projection import (
    PlanarCoordinate,
    Projector,
    TrueProjection,
    ApproximateFallback,
    make_projector,
    utm_zone,
)
from .polygon import PolygonMetrics, shoelace_area, local_tangent_plane

__all__ = [
    "EARTH_RADIUS_M",
    "distance",
    "bearing",
    "normalize_angle",
    "signed_angle_difference",
    "format_bearing",
    "format_area",
    "format_acres",
    "format_distance",
    "parse_coordinate_query",
    "PlanarCoordinate",
    "Projector",
    "TrueProjection",
    "ApproximateFallback",
    "make_projector",
    "utm_zone",
    "PolygonMetrics",
    "shoelace_area",
    "local_tangent_plane",
]
