"""
Field Survey - boundary capture and field staking

Records geographic points (GPS-averaged or manually placed) and derives the
geometry of the resulting boundary, with a staking mode that keeps newly
placed points on a straight line.

Conventions:
- Coordinates: Latitude/longitude in degrees (WGS84)
- Bearing: North = 0, clockwise positive, degrees in [0, 360)
- Distance: Meters (spherical earth, R = 6,371,000 m)
- Area: Square meters (UTM projection, spherical fallback)
- Turn direction: Separate Left/Right tag, never a signed angle
- Point IDs: String type
"""

__version__ = "1.0.0"
__author__ = "Field Survey"

from .core.models import GeoPoint, PointKind, TurnDirection, PointSequence, StakingSession, Survey
from .core.geodesy import (
    distance,
    bearing,
    normalize_angle,
    format_bearing,
    PolygonMetrics,
    TrueProjection,
    ApproximateFallback,
    make_projector,
)
from .core.staking import StakingEngine
from .core.sampling import PositionFix, SampleAggregator, SampleWindow
from .core.results import PolygonMetricsResult, AddPointOutcome, CollinearityRejection
from .settings import SurveySettings
from .service import SurveyService

__all__ = [
    # Version
    "__version__",

    # Models
    "GeoPoint",
    "PointKind",
    "TurnDirection",
    "PointSequence",
    "StakingSession",
    "Survey",

    # Geodesy
    "distance",
    "bearing",
    "normalize_angle",
    "format_bearing",
    "PolygonMetrics",
    "TrueProjection",
    "ApproximateFallback",
    "make_projector",

    # Staking / sampling
    "StakingEngine",
    "PositionFix",
    "SampleAggregator",
    "SampleWindow",

    # Results
    "PolygonMetricsResult",
    "AddPointOutcome",
    "CollinearityRejection",

    # Application
    "SurveySettings",
    "SurveyService",
]
