"""
Data models for field surveys.

This module provides the core data structures:
- GeoPoint: Captured point with derived sequence fields
- PointSequence: Ordered working boundary
- StakingSession: Transient staking state
- Survey: Named point sequence with cached metrics
"""

from .point import GeoPoint, PointKind, TurnDirection, new_point_id, now_ms
from .sequence import PointSequence
from .session import StakingSession, StakingState, BaselineState
from .survey import Survey

__all__ = [
    "GeoPoint",
    "PointKind",
    "TurnDirection",
    "new_point_id",
    "now_ms",
    "PointSequence",
    "StakingSession",
    "StakingState",
    "BaselineState",
    "Survey",
]
