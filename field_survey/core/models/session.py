"""
Staking session state.

The session is transient: it lives as long as the process and is never saved
with the survey. It references points of the current sequence by id only;
an id that no longer resolves is treated as a cleared baseline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class StakingState(Enum):
    """Primary staking state."""
    IDLE = "idle"
    SINGLE_ANCHOR = "single_anchor"
    TRACKING = "tracking"


class BaselineState(Enum):
    """Orthogonal baseline sub-state used for intermediate snapping."""
    NONE = "none"
    ARMED = "armed"
    SET = "set"


@dataclass
class StakingSession:
    """
    Mutable staking configuration and running state.

    Attributes:
        is_active: Staking mode toggled on
        current_bearing: Established line bearing (degrees), None until set
        target_bearing: Explicit user-chosen bearing, overrides current_bearing
        strict_collinearity: Reject points beyond tolerance
        tolerance_degrees: Collinearity tolerance (degrees)
        baseline_start_id: Point id of the baseline start
        baseline_end_id: Point id of the baseline end
        baseline_bearing: Cached start->end bearing once the baseline is set
        baseline_distance: Cached start->end distance once the baseline is set
    """

    is_active: bool = False
    current_bearing: Optional[float] = None
    target_bearing: Optional[float] = None
    strict_collinearity: bool = False
    tolerance_degrees: float = 1.0
    baseline_start_id: Optional[str] = None
    baseline_end_id: Optional[str] = None
    baseline_bearing: Optional[float] = None
    baseline_distance: Optional[float] = None

    def __post_init__(self):
        """Validate session configuration after initialization."""
        if self.tolerance_degrees < 0:
            raise ValueError("tolerance_degrees cannot be negative")

    @property
    def state(self) -> StakingState:
        if not self.is_active:
            return StakingState.IDLE
        if self.current_bearing is None:
            return StakingState.SINGLE_ANCHOR
        return StakingState.TRACKING

    @property
    def baseline_state(self) -> BaselineState:
        if self.baseline_start_id is None:
            return BaselineState.NONE
        if self.baseline_end_id is None:
            return BaselineState.ARMED
        return BaselineState.SET

    @property
    def reference_bearing(self) -> Optional[float]:
        """Bearing new points are compared against: target first, then current."""
        if self.target_bearing is not None:
            return self.target_bearing
        return self.current_bearing

    def clear_baseline(self) -> None:
        self.baseline_start_id = None
        self.baseline_end_id = None
        self.baseline_bearing = None
        self.baseline_distance = None

    def reset(self) -> None:
        """Clear line bearing, target and baseline. Settings are kept."""
        self.current_bearing = None
        self.target_bearing = None
        self.clear_baseline()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize session (for diagnostics; sessions are not persisted)."""
        return {
            "isActive": self.is_active,
            "state": self.state.value,
            "currentBearing": self.current_bearing,
            "targetBearing": self.target_bearing,
            "strictCollinearity": self.strict_collinearity,
            "toleranceDegrees": self.tolerance_degrees,
            "baselineStartId": self.baseline_start_id,
            "baselineEndId": self.baseline_end_id,
            "baselineBearing": self.baseline_bearing,
            "baselineDistance": self.baseline_distance,
        }

    def __repr__(self) -> str:
        return (
            f"StakingSession({self.state.value}, "
            f"bearing={self.current_bearing}, "
            f"baseline={self.baseline_state.value})"
        )
