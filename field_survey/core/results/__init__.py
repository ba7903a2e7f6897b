"""
Result classes for field survey computations.
"""

from .outcomes import (
    PolygonMetricsResult,
    AddPointOutcome,
    CollinearityRejection,
    CrossTrackError,
    Deviation,
    LiveDeviation,
    Navigation,
)

__all__ = [
    "PolygonMetricsResult",
    "AddPointOutcome",
    "CollinearityRejection",
    "CrossTrackError",
    "Deviation",
    "LiveDeviation",
    "Navigation",
]
