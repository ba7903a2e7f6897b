"""field_survey.core.sampling.aggregator

Accuracy-weighted averaging of repeated GPS fixes.

Weights are ``1 / accuracy**2``; a missing or zero accuracy gets weight 1.
Fixes reporting a non-finite or negative accuracy are dropped as invalid.
The reported accuracy is the plain mean of the sample accuracies, which is the
figure compared against the user's acceptance threshold. Whether a point that
exceeds the threshold is kept is the caller's decision.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np


@dataclass(frozen=True)
class PositionFix:
    """
    One raw position fix.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
        accuracy: Horizontal accuracy radius in meters, None if not reported
        altitude: Altitude in meters, None if not reported
        timestamp: Seconds since the epoch, None if not reported
    """

    lat: float
    lng: float
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    timestamp: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        """Finite in-range coordinates and, if reported, a finite non-negative accuracy."""
        if self.accuracy is not None and not (math.isfinite(self.accuracy) and self.accuracy >= 0):
            return False
        return (
            math.isfinite(self.lat) and math.isfinite(self.lng)
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lng <= 180.0
        )

    @property
    def weight(self) -> float:
        acc = self.accuracy
        if acc is None or acc == 0:
            return 1.0
        sq = acc * acc
        # Sub-1e-154 accuracies underflow to 0
        if sq == 0.0:
            return 1.0
        return 1.0 / sq


@dataclass(frozen=True)
class AggregatedPosition:
    """
    Result of averaging a window of fixes.

    An empty window yields ``sample_count == 0`` and no position.
    """

    sample_count: int
    lat: Optional[float] = None
    lng: Optional[float] = None
    altitude: Optional[float] = None
    accuracy: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.sample_count == 0

    def exceeds(self, threshold: float) -> bool:
        """True when the mean accuracy is worse than ``threshold`` meters."""
        return self.accuracy is not None and self.accuracy > threshold


EMPTY_POSITION = AggregatedPosition(sample_count=0)


def _usable_weights(weights: List[float]) -> np.ndarray:
    """Weights as an array; equal weights when all are 0 (squared accuracy overflowed)."""
    arr = np.array(weights, dtype=float)
    if not np.any(arr > 0):
        return np.ones_like(arr)
    return arr


class SampleAggregator:
    """Combines noisy fixes into one accuracy-weighted position."""

    def aggregate(self, fixes: Iterable[PositionFix]) -> AggregatedPosition:
        samples = [f for f in fixes if f.is_valid]
        if not samples:
            return EMPTY_POSITION

        weights = _usable_weights([f.weight for f in samples])
        lats = np.array([f.lat for f in samples], dtype=float)
        lngs = np.array([f.lng for f in samples], dtype=float)

        lat = float(np.average(lats, weights=weights))
        lng = float(np.average(lngs, weights=weights))

        with_alt = [f for f in samples if f.altitude is not None and math.isfinite(f.altitude)]
        altitude = None
        if with_alt:
            altitude = float(np.average(
                np.array([f.altitude for f in with_alt], dtype=float),
                weights=_usable_weights([f.weight for f in with_alt]),
            ))

        reported = [f.accuracy for f in samples if f.accuracy is not None]
        accuracy = float(np.mean(reported)) if reported else None

        return AggregatedPosition(
            sample_count=len(samples),
            lat=lat,
            lng=lng,
            altitude=altitude,
            accuracy=accuracy,
        )


@dataclass
class SampleWindow:
    """
    Collects fixes for a fixed averaging period.

    Stopping early simply truncates the sample set; :meth:`stop` always
    returns a valid (possibly empty) aggregate.

    Attributes:
        duration_s: Length of the averaging window in seconds
        started_at: Window start (seconds since the epoch)
    """

    duration_s: float = 20.0
    started_at: float = field(default_factory=time.time)
    samples: List[PositionFix] = field(default_factory=list)
    aggregator: SampleAggregator = field(default_factory=SampleAggregator)
    stopped: bool = False

    def __post_init__(self):
        if self.duration_s <= 0:
            raise ValueError("duration_s must be positive")

    def time_left(self, now: Optional[float] = None) -> float:
        now = time.time() if now is None else now
        return max(0.0, self.started_at + self.duration_s - now)

    def is_complete(self, now: Optional[float] = None) -> bool:
        return self.stopped or self.time_left(now) <= 0.0

    def add(self, fix: PositionFix, now: Optional[float] = None) -> bool:
        """Record a fix; returns False once the window is complete."""
        if self.is_complete(now):
            return False
        self.samples.append(fix)
        return True

    def stop(self) -> AggregatedPosition:
        """Close the window and aggregate whatever was collected."""
        self.stopped = True
        return self.aggregator.aggregate(self.samples)
