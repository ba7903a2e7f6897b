"""Survey application layer.

:class:`SurveyService` wires the core together for a hosting application:
GPS averaging, labelling, staking, metrics, and storage through an injected
repository. Interaction hooks are plain callables passed in explicitly:

- ``confirm_low_accuracy(position, threshold) -> bool`` is asked whether a
  GPS point whose mean accuracy exceeds the threshold should be kept;
- ``on_change(survey)`` is notified after every committed change.

Every mutation is committed atomically: the point sequence and staking
session are snapshotted, changed, and saved; if saving fails both are
restored and the error propagates.
A point rejected by strict staking changes nothing and is neither saved nor
reported to ``on_change``.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from .core.geodesy.polygon import PolygonMetrics
from .core.geodesy.projection import Projector
from .core.models.point import GeoPoint, PointKind, TurnDirection
from .core.models.survey import Survey
from .core.results.outcomes import AddPointOutcome, LiveDeviation, Navigation, PolygonMetricsResult
from .core.sampling.aggregator import AggregatedPosition, PositionFix, SampleAggregator, SampleWindow
from .core.staking.engine import StakingEngine
from .io.normalize import load_document
from .io.repository import SurveyRepository
from .settings import SurveySettings

logger = logging.getLogger(__name__)


ConfirmLowAccuracy = Callable[[AggregatedPosition, float], bool]
OnChange = Callable[[Survey], None]


class SurveyService:
    """
    Application-level operations on the current survey.

    Args:
        repository: Where surveys are loaded from and saved to
        settings: Settings store (in-memory defaults when omitted)
        projector: Projector for area computation (built from settings when omitted)
        confirm_low_accuracy: Asked before keeping a low-accuracy GPS point;
            when omitted such points are kept
        on_change: Called with the survey after each committed change
    """

    def __init__(
        self,
        repository: SurveyRepository,
        settings: Optional[SurveySettings] = None,
        projector: Optional[Projector] = None,
        confirm_low_accuracy: Optional[ConfirmLowAccuracy] = None,
        on_change: Optional[OnChange] = None,
    ):
        self.repository = repository
        self.settings = settings if settings is not None else SurveySettings()
        self.polygon = PolygonMetrics(projector if projector is not None else self.settings.make_projector())
        self.engine = StakingEngine(self.settings.new_staking_session())
        self.aggregator = SampleAggregator()
        self.confirm_low_accuracy = confirm_low_accuracy
        self.on_change = on_change
        self.current = Survey()

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def _commit(self, change: Callable[[], Any]) -> Any:
        survey = self.current
        points_snapshot = survey.points.snapshot()
        session_snapshot = dataclasses.replace(self.engine.session)
        cached = (survey.area, survey.perimeter, survey.updated)
        try:
            result = change()
            if isinstance(result, AddPointOutcome) and not result.accepted:
                return result
            metrics = self.polygon.measure(survey.points)
            survey.area = metrics.area_m2
            survey.perimeter = metrics.perimeter_m
            survey.touch()
            self.repository.save(survey)
        except Exception:
            survey.points.restore(points_snapshot)
            self.engine.session = session_snapshot
            survey.area, survey.perimeter, survey.updated = cached
            raise
        if self.on_change is not None:
            self.on_change(survey)
        return result

    # ------------------------------------------------------------------
    # Surveys
    # ------------------------------------------------------------------

    def surveys(self) -> List[Survey]:
        return self.repository.load()

    def new_survey(self, name: str = "Untitled Survey") -> Survey:
        self.current = Survey(name=name)
        self.engine.session.clear_baseline()
        self._commit(lambda: None)
        return self.current

    def load_survey(self, survey_id: str) -> Survey:
        """
        Make a stored survey current.

        Raises:
            KeyError: If the survey does not exist
        """
        survey = self.repository.get(survey_id)
        if survey is None:
            raise KeyError(f"Survey '{survey_id}' not found")
        self.current = survey
        self.engine.session.clear_baseline()
        return survey

    def delete_survey(self, survey_id: str) -> None:
        self.repository.delete(survey_id)
        if self.current.id == str(survey_id):
            self.current = Survey()

    def clear_points(self) -> None:
        """Empty the current survey's points, keeping its identity."""
        self._commit(self.current.points.clear)

    def import_document(self, data: Union[str, bytes, Mapping[str, Any]]) -> List[Survey]:
        """
        Import one or many surveys, overwriting stored surveys with the same id.

        The last imported survey becomes current.
        """
        surveys = load_document(data)
        for s in surveys:
            self.repository.save(s)
        if surveys:
            self.current = surveys[-1]
            self.engine.session.clear_baseline()
        logger.debug("Imported %d surveys", len(surveys))
        return surveys

    # ------------------------------------------------------------------
    # Adding points
    # ------------------------------------------------------------------

    def start_averaging(self) -> SampleWindow:
        """A sample window using the configured averaging duration."""
        return SampleWindow(
            duration_s=self.settings.get("averaging_duration_s"),
            aggregator=self.aggregator,
        )

    def _label_for(self, point: GeoPoint) -> str:
        points = self.current.points
        if self.engine.will_snap(points):
            return f"i{points.count(PointKind.INTERMEDIATE) + 1}"
        if point.kind == PointKind.GPS:
            return chr(65 + points.count(PointKind.GPS) % 26)
        if point.kind == PointKind.STAKING:
            return f"S{points.count(PointKind.STAKING) + 1}"
        if point.kind == PointKind.MANUAL:
            return f"M{points.count(PointKind.MANUAL) + 1}"
        return str(len(points) + 1)

    def add_point(self, point: GeoPoint) -> AddPointOutcome:
        """Add a point through the staking engine and save the survey."""
        if point.label is None:
            point = point.evolve(label=self._label_for(point))
        return self._commit(lambda: self.engine.add_point(self.current.points, point))

    def add_gps_point(self, fixes: List[PositionFix]) -> Optional[AddPointOutcome]:
        """
        Average a window of fixes into one point and add it.

        Returns:
            The add outcome, or None when there were no usable samples or
            the user declined a low-accuracy point
        """
        position = self.aggregator.aggregate(fixes)
        if position.is_empty:
            logger.info("No GPS samples collected")
            return None

        threshold = self.settings.get("gps_accuracy_threshold")
        if position.exceeds(threshold):
            if self.confirm_low_accuracy is not None and not self.confirm_low_accuracy(position, threshold):
                logger.info("Low-accuracy point (±%.1f m) discarded", position.accuracy)
                return None
            logger.warning("Keeping point with accuracy ±%.1f m above threshold ±%.1f m",
                           position.accuracy, threshold)

        kind = PointKind.STAKING if self.engine.session.is_active else PointKind.GPS
        point = GeoPoint.create(
            position.lat,
            position.lng,
            kind=kind,
            altitude=position.altitude,
            accuracy=position.accuracy,
        )
        return self.add_point(point)

    def add_manual_point(self, lat: float, lng: float) -> AddPointOutcome:
        return self.add_point(GeoPoint.create(lat, lng, kind=PointKind.MANUAL))

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def move_point(self, point_id: str, lat: float, lng: float) -> GeoPoint:
        """
        Move a point; every following point is re-derived.

        Raises:
            KeyError: If the point does not exist
        """
        return self._commit(lambda: self.current.points.move(point_id, lat, lng))

    def delete_point(self, point_id: str) -> GeoPoint:
        """
        Delete a point; every following point is re-derived.

        Raises:
            KeyError: If the point does not exist
        """
        return self._commit(lambda: self.current.points.remove(point_id))

    # ------------------------------------------------------------------
    # Staking
    # ------------------------------------------------------------------

    def toggle_staking(self) -> bool:
        active = self.engine.toggle()
        if active:
            self.current.is_staking = True
        return active

    def select_point(self, point_id: str):
        """Feed a point tap into the baseline selection (staking only)."""
        if not self.engine.session.is_active:
            return self.engine.baseline_state
        return self.engine.select_point(self.current.points, point_id)

    def turn_corner(self, direction: TurnDirection, angle: Optional[float] = None) -> Optional[float]:
        if angle is None:
            angle = self.settings.get("default_corner_angle")
        return self.engine.turn_corner(direction, angle)

    def live_deviation(self, lat: float, lng: float) -> Optional[LiveDeviation]:
        return self.engine.live_deviation(self.current.points, lat, lng)

    def navigate_to(self, point_id: str, lat: float, lng: float) -> Optional[Navigation]:
        target = self.current.points.find(point_id)
        if target is None:
            return None
        return self.engine.navigation_to(lat, lng, target)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def metrics(self) -> PolygonMetricsResult:
        return self.polygon.measure(self.current.points)
