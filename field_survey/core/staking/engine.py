"""field_survey.core.staking.engine

Staking state machine: keeps newly placed points on a straight line.

States (see :class:`~field_survey.core.models.session.StakingState`):
  - IDLE: staking off
  - SINGLE_ANCHOR: staking on, no line bearing yet
  - TRACKING: a line bearing exists; new points are checked against it

Orthogonal baseline sub-state (NONE / ARMED / SET): while a baseline is set,
new points are projected onto the segment between its two endpoints.

Conventions:
  - Bearings in degrees, North = 0, clockwise positive
  - Signed angular differences in (-180, 180]; positive means RIGHT of line
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from ..geodesy.primitives import bearing, distance, normalize_angle, signed_angle_difference
from ..models.point import GeoPoint, PointKind, TurnDirection
from ..models.sequence import PointSequence
from ..models.session import BaselineState, StakingSession, StakingState
from ..results.outcomes import (
    AddPointOutcome,
    CollinearityRejection,
    CrossTrackError,
    Deviation,
    LiveDeviation,
    Navigation,
)

logger = logging.getLogger(__name__)


DEFAULT_CORNER_ANGLE = 90.0

NEUTRAL_DEVIATION = Deviation(error=0.0, direction=TurnDirection.RIGHT)
NEUTRAL_CROSS_TRACK = CrossTrackError(distance=0.0, direction=TurnDirection.RIGHT, signed_offset=0.0)


def _finite(*values: Optional[float]) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def _side(signed: float) -> TurnDirection:
    return TurnDirection.RIGHT if signed > 0 else TurnDirection.LEFT


# =============================================================================
# Pure line geometry
# =============================================================================

def deviation_from_bearing(actual: float, reference: float) -> Deviation:
    """Absolute angular deviation of ``actual`` from ``reference``, with side."""
    if not _finite(actual, reference):
        return NEUTRAL_DEVIATION
    diff = signed_angle_difference(actual, reference)
    return Deviation(error=abs(diff), direction=_side(diff))


def collinearity(
    start_lat: float,
    start_lng: float,
    target_bearing: float,
    lat: float,
    lng: float,
) -> Deviation:
    """Deviation of the bearing start->(lat, lng) from ``target_bearing``."""
    if not _finite(start_lat, start_lng, target_bearing, lat, lng):
        return NEUTRAL_DEVIATION
    actual = bearing(start_lat, start_lng, lat, lng)
    return deviation_from_bearing(actual, target_bearing)


def cross_track(
    start_lat: float,
    start_lng: float,
    target_bearing: float,
    lat: float,
    lng: float,
) -> CrossTrackError:
    """Perpendicular offset of (lat, lng) from the line through start at ``target_bearing``.

    offset = distance(start, fix) * sin(bearing_to_fix - target_bearing)
    """
    if not _finite(start_lat, start_lng, target_bearing, lat, lng):
        return NEUTRAL_CROSS_TRACK
    dist = distance(start_lat, start_lng, lat, lng)
    diff = signed_angle_difference(bearing(start_lat, start_lng, lat, lng), target_bearing)
    xte = dist * math.sin(math.radians(diff))
    if not math.isfinite(xte):
        return NEUTRAL_CROSS_TRACK
    return CrossTrackError(distance=abs(xte), direction=_side(xte), signed_offset=xte)


def snap_to_baseline(
    start_lat: float,
    start_lng: float,
    end_lat: float,
    end_lng: float,
    lat: float,
    lng: float,
) -> Tuple[float, float]:
    """Project (lat, lng) onto the start-end segment.

    The projection parameter ``t`` is clamped to [0, 1] so the result never
    extends past either endpoint. A zero-length baseline, or any non-finite
    input, returns the start point.
    """
    if not _finite(start_lat, start_lng, end_lat, end_lng, lat, lng):
        return start_lat, start_lng
    d_lat = end_lat - start_lat
    d_lng = end_lng - start_lng
    length_sq = d_lat * d_lat + d_lng * d_lng
    if length_sq == 0.0:
        return start_lat, start_lng
    t = ((lat - start_lat) * d_lat + (lng - start_lng) * d_lng) / length_sq
    t = max(0.0, min(1.0, t))
    return start_lat + t * d_lat, start_lng + t * d_lng


# =============================================================================
# State machine
# =============================================================================

class StakingEngine:
    """
    Drives a :class:`StakingSession` against a :class:`PointSequence`.

    The engine never owns the sequence; it is handed the sequence on every
    call and only appends to it when a point is accepted.
    """

    def __init__(self, session: Optional[StakingSession] = None):
        self.session = session if session is not None else StakingSession()

    @property
    def state(self) -> StakingState:
        return self.session.state

    @property
    def baseline_state(self) -> BaselineState:
        return self.session.baseline_state

    # ------------------------------------------------------------------
    # Mode and configuration
    # ------------------------------------------------------------------

    def activate(self) -> None:
        self.session.is_active = True

    def deactivate(self) -> None:
        """Turn staking off; line bearing, target and baseline are cleared."""
        self.session.is_active = False
        self.session.reset()

    def toggle(self) -> bool:
        """Flip staking mode and return the new ``is_active``."""
        if self.session.is_active:
            self.deactivate()
        else:
            self.activate()
        return self.session.is_active

    def set_target_bearing(self, value: Optional[float]) -> None:
        """Set (or clear with None) the explicit target bearing."""
        self.session.target_bearing = None if value is None else normalize_angle(value)

    def set_current_bearing(self, value: Optional[float]) -> None:
        """Establish the line bearing explicitly."""
        self.session.current_bearing = None if value is None else normalize_angle(value)

    def turn_corner(
        self,
        direction: TurnDirection,
        angle: float = DEFAULT_CORNER_ANGLE,
    ) -> Optional[float]:
        """
        Rotate the running line bearing at a corner.

        No point is added. Without an established bearing this is a no-op.

        Returns:
            The new bearing, or None when there was nothing to rotate
        """
        current = self.session.current_bearing
        if current is None:
            return None
        if not _finite(angle):
            angle = DEFAULT_CORNER_ANGLE
        delta = -angle if direction == TurnDirection.LEFT else angle
        self.session.current_bearing = normalize_angle(current + delta)
        return self.session.current_bearing

    # ------------------------------------------------------------------
    # Baseline
    # ------------------------------------------------------------------

    def clear_baseline(self) -> None:
        self.session.clear_baseline()
        logger.debug("Baseline cleared")

    def resolve_baseline(self, sequence: PointSequence) -> Optional[Tuple[GeoPoint, GeoPoint]]:
        """
        Look up the baseline endpoints in ``sequence``.

        A baseline whose points no longer exist is cleared.

        Returns:
            (start, end) when the baseline is fully set and resolvable
        """
        session = self.session
        if session.baseline_state != BaselineState.SET:
            if session.baseline_start_id is not None and sequence.find(session.baseline_start_id) is None:
                self.clear_baseline()
            return None
        start = sequence.find(session.baseline_start_id)
        end = sequence.find(session.baseline_end_id)
        if start is None or end is None:
            self.clear_baseline()
            return None
        return start, end

    def select_point(self, sequence: PointSequence, point_id: str) -> BaselineState:
        """
        Feed a point selection into the baseline sub-state.

        First selection arms the baseline start, the second sets the end
        (bearing and distance are cached once), and any further selection
        starts a fresh baseline at the selected point. Ids not in the
        sequence are ignored.
        """
        point = sequence.find(point_id)
        if point is None:
            return self.baseline_state

        session = self.session
        state = session.baseline_state
        if state == BaselineState.ARMED and sequence.find(session.baseline_start_id) is None:
            state = BaselineState.NONE

        if state == BaselineState.ARMED:
            start = sequence.get(session.baseline_start_id)
            session.baseline_end_id = point.id
            session.baseline_bearing = bearing(start.lat, start.lng, point.lat, point.lng)
            session.baseline_distance = distance(start.lat, start.lng, point.lat, point.lng)
            logger.debug("Baseline set %s -> %s (%.3f m)", start.id, point.id, session.baseline_distance)
        else:
            session.clear_baseline()
            session.baseline_start_id = point.id
            logger.debug("Baseline armed at %s", point.id)
        return session.baseline_state

    # ------------------------------------------------------------------
    # Adding points
    # ------------------------------------------------------------------

    def will_snap(self, sequence: PointSequence) -> bool:
        """True when the next added point will be projected onto the baseline."""
        return self.session.is_active and self.resolve_baseline(sequence) is not None

    def _snap(self, sequence: PointSequence, point: GeoPoint) -> GeoPoint:
        if not (self.session.is_active and point.is_valid):
            return point
        ends = self.resolve_baseline(sequence)
        if ends is None:
            return point
        start, end = ends
        lat, lng = snap_to_baseline(start.lat, start.lng, end.lat, end.lng, point.lat, point.lng)
        return point.evolve(lat=lat, lng=lng, kind=PointKind.INTERMEDIATE, is_snapped=True)

    def add_point(self, sequence: PointSequence, point: GeoPoint) -> AddPointOutcome:
        """
        Add a point under the staking rules.

        With staking active and a predecessor present, the bearing/distance
        from the predecessor are derived. The first derived bearing becomes
        the line bearing; afterwards each point's collinearity error is
        measured against the target bearing (or the line bearing). In strict
        mode a point beyond tolerance is rejected and nothing changes.

        Returns:
            AddPointOutcome describing the stored point or the rejection
        """
        session = self.session
        candidate = self._snap(sequence, point)
        previous = sequence.last
        established: Optional[float] = None

        if (
            session.is_active
            and previous is not None
            and previous.is_valid
            and candidate.is_valid
        ):
            actual = bearing(previous.lat, previous.lng, candidate.lat, candidate.lng)
            if session.current_bearing is None:
                established = actual
            elif candidate.is_snapped:
                # On the baseline by construction
                candidate = candidate.evolve(collinearity_error=0.0)
            else:
                dev = deviation_from_bearing(actual, session.reference_bearing)
                if session.strict_collinearity and dev.error > session.tolerance_degrees:
                    rejection = CollinearityRejection(
                        error=dev.error,
                        tolerance=session.tolerance_degrees,
                        direction=dev.direction,
                    )
                    logger.info("Point rejected: %s", rejection.message)
                    return AddPointOutcome.rejected(rejection)
                candidate = candidate.evolve(
                    collinearity_error=dev.error,
                    turn_direction=dev.direction,
                )

        stored = sequence.append(candidate)
        if established is not None:
            session.current_bearing = established
        return AddPointOutcome(accepted=True, point=stored, established_bearing=established)

    # ------------------------------------------------------------------
    # Live guidance (never mutates)
    # ------------------------------------------------------------------

    def _origin(self, sequence: PointSequence) -> Optional[GeoPoint]:
        last = sequence.last
        return last if last is not None and last.is_valid else None

    def cross_track_error(
        self,
        sequence: PointSequence,
        lat: float,
        lng: float,
        target_bearing: Optional[float] = None,
    ) -> CrossTrackError:
        """Offset of a live fix from the line through the last point."""
        origin = self._origin(sequence)
        reference = target_bearing if target_bearing is not None else self.session.reference_bearing
        if origin is None or reference is None:
            return NEUTRAL_CROSS_TRACK
        return cross_track(origin.lat, origin.lng, reference, lat, lng)

    def live_deviation(self, sequence: PointSequence, lat: float, lng: float) -> Optional[LiveDeviation]:
        """
        Collinearity and cross-track guidance for a live fix.

        Returns:
            None when there is no origin point yet
        """
        origin = self._origin(sequence)
        if origin is None:
            return None
        reference = self.session.reference_bearing
        to_fix = bearing(origin.lat, origin.lng, lat, lng)
        if reference is None:
            dev = NEUTRAL_DEVIATION
            xte = NEUTRAL_CROSS_TRACK
        else:
            dev = deviation_from_bearing(to_fix, reference)
            xte = cross_track(origin.lat, origin.lng, reference, lat, lng)
        return LiveDeviation(
            reference_bearing=reference,
            bearing_to_fix=to_fix,
            distance_to_fix=distance(origin.lat, origin.lng, lat, lng),
            collinearity=dev,
            cross_track=xte,
        )

    @staticmethod
    def navigation_to(lat: float, lng: float, target: GeoPoint) -> Navigation:
        """Distance and bearing from a live fix to ``target``."""
        return Navigation(
            target_id=target.id,
            distance=distance(lat, lng, target.lat, target.lng),
            bearing=bearing(lat, lng, target.lat, target.lng),
        )

    def __repr__(self) -> str:
        return f"StakingEngine({self.session!r})"
