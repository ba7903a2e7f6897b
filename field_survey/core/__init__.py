"""
Core module for field surveys.

Pure computation with no storage or UI dependencies: geodetic primitives,
projection, polygon metrics, the staking state machine and GPS sample
aggregation.
"""

from .models import (
    GeoPoint,
    PointKind,
    TurnDirection,
    PointSequence,
    StakingSession,
    StakingState,
    BaselineState,
    Survey,
)

from .geodesy import (
    distance,
    bearing,
    normalize_angle,
    signed_angle_difference,
    format_bearing,
    PlanarCoordinate,
    Projector,
    TrueProjection,
    ApproximateFallback,
    make_projector,
    PolygonMetrics,
    shoelace_area,
)

from .staking import StakingEngine, collinearity, cross_track, snap_to_baseline

from .sampling import PositionFix, AggregatedPosition, SampleAggregator, SampleWindow

from .results import (
    PolygonMetricsResult,
    AddPointOutcome,
    CollinearityRejection,
    CrossTrackError,
    Deviation,
    LiveDeviation,
    Navigation,
)

__all__ = [
    # Models
    "GeoPoint",
    "PointKind",
    "TurnDirection",
    "PointSequence",
    "StakingSession",
    "StakingState",
    "BaselineState",
    "Survey",

    # Geodesy
    "distance",
    "bearing",
    "normalize_angle",
    "signed_angle_difference",
    "format_bearing",
    "PlanarCoordinate",
    "Projector",
    "TrueProjection",
    "ApproximateFallback",
    "make_projector",
    "PolygonMetrics",
    "shoelace_area",

    # Staking
    "StakingEngine",
    "collinearity",
    "cross_track",
    "snap_to_baseline",

    # Sampling
    "PositionFix",
    "AggregatedPosition",
    "SampleAggregator",
    "SampleWindow",

    # Results
    "PolygonMetricsResult",
    "AddPointOutcome",
    "CollinearityRejection",
    "CrossTrackError",
    "Deviation",
    "LiveDeviation",
    "Navigation",
]
