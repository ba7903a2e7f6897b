"""GPS sample aggregation."""

from .aggregator import PositionFix, AggregatedPosition, SampleAggregator, SampleWindow

__all__ = ["PositionFix", "AggregatedPosition", "SampleAggregator", "SampleWindow"]
