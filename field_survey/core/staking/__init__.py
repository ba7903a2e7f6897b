"""Staking state machine and line geometry."""

from .engine import (
    StakingEngine,
    collinearity,
    cross_track,
    deviation_from_bearing,
    snap_to_baseline,
)

__all__ = [
    "StakingEngine",
    "collinearity",
    "cross_track",
    "deviation_from_bearing",
    "snap_to_baseline",
]
