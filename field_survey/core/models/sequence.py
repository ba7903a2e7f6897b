"""
PointSequence: the ordered working boundary of a survey.

Order is both the drawing order and the basis of the per-point derived
fields: each point's distance/bearing is relative to its immediate
predecessor. Every mutation rebuilds the whole list with freshly derived
fields and swaps it in at once, so the sequence is never partially updated.
"""

from typing import Iterator, List, Optional, Sequence, Tuple, Union, overload

from .point import GeoPoint
from ..geodesy.primitives import bearing, distance


def derive_from_previous(point: GeoPoint, previous: Optional[GeoPoint]) -> GeoPoint:
    """Return ``point`` with distance/bearing relative to ``previous``.

    The first point of a sequence, and any pair involving an invalid point,
    gets the neutral values 0/0.
    """
    if previous is None or not (point.is_valid and previous.is_valid):
        return point.evolve(distance=0.0, bearing=0.0)
    return point.evolve(
        distance=distance(previous.lat, previous.lng, point.lat, point.lng),
        bearing=bearing(previous.lat, previous.lng, point.lat, point.lng),
    )


def rederive(points: Sequence[GeoPoint]) -> List[GeoPoint]:
    """Re-derive distance/bearing for every point. O(n)."""
    result: List[GeoPoint] = []
    previous: Optional[GeoPoint] = None
    for point in points:
        result.append(derive_from_previous(point, previous))
        previous = point
    return result


class PointSequence:
    """Ordered, id-addressable list of GeoPoints."""

    def __init__(self, points: Optional[Sequence[GeoPoint]] = None, derive: bool = True):
        """
        Args:
            points: Initial points, in order
            derive: Re-derive distance/bearing for the initial points. Pass
                False to keep stored fields verbatim (e.g. when loading).
        """
        initial = list(points or [])
        self._points: Tuple[GeoPoint, ...] = tuple(rederive(initial) if derive else initial)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def points(self) -> Tuple[GeoPoint, ...]:
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points)

    @overload
    def __getitem__(self, index: int) -> GeoPoint: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[GeoPoint, ...]: ...

    def __getitem__(self, index: Union[int, slice]):
        return self._points[index]

    def __bool__(self) -> bool:
        return bool(self._points)

    @property
    def last(self) -> Optional[GeoPoint]:
        return self._points[-1] if self._points else None

    def valid_points(self) -> List[GeoPoint]:
        """Points that pass coordinate validation, in order."""
        return [p for p in self._points if p.is_valid]

    def index_of(self, point_id: str) -> int:
        """
        Index of a point by id.

        Raises:
            KeyError: If point_id is not in the sequence
        """
        key = str(point_id)
        for i, p in enumerate(self._points):
            if p.id == key:
                return i
        raise KeyError(f"Point '{point_id}' not found in sequence")

    def find(self, point_id: Optional[str]) -> Optional[GeoPoint]:
        """Point by id, or None when absent."""
        if point_id is None:
            return None
        key = str(point_id)
        for p in self._points:
            if p.id == key:
                return p
        return None

    def get(self, point_id: str) -> GeoPoint:
        """
        Retrieve a point by id.

        Raises:
            KeyError: If point_id is not in the sequence
        """
        return self._points[self.index_of(point_id)]

    def count(self, kind) -> int:
        """Number of points of a given PointKind."""
        return sum(1 for p in self._points if p.kind == kind)

    # ------------------------------------------------------------------
    # Mutation (each rebuilds the full list, then swaps it in)
    # ------------------------------------------------------------------

    def _swap(self, points: List[GeoPoint]) -> None:
        self._points = tuple(rederive(points))

    def append(self, point: GeoPoint) -> GeoPoint:
        """Append a point and return the stored (derived) instance."""
        if self.find(point.id) is not None:
            raise ValueError(f"Point '{point.id}' already exists in sequence")
        self._swap(list(self._points) + [point])
        return self._points[-1]

    def insert(self, index: int, point: GeoPoint) -> GeoPoint:
        """Insert a point before ``index``."""
        if self.find(point.id) is not None:
            raise ValueError(f"Point '{point.id}' already exists in sequence")
        points = list(self._points)
        points.insert(index, point)
        self._swap(points)
        return self.get(point.id)

    def remove(self, point_id: str) -> GeoPoint:
        """
        Remove a point by id and return it.

        Raises:
            KeyError: If point_id is not in the sequence
        """
        idx = self.index_of(point_id)
        points = list(self._points)
        removed = points.pop(idx)
        self._swap(points)
        return removed

    def move(self, point_id: str, lat: float, lng: float) -> GeoPoint:
        """
        Move a point to a new position.

        Raises:
            KeyError: If point_id is not in the sequence
        """
        idx = self.index_of(point_id)
        points = list(self._points)
        points[idx] = points[idx].evolve(lat=float(lat), lng=float(lng))
        self._swap(points)
        return self._points[idx]

    def clear(self) -> None:
        self._points = ()

    def snapshot(self) -> Tuple[GeoPoint, ...]:
        """Opaque state to hand back to :meth:`restore`."""
        return self._points

    def restore(self, snapshot: Tuple[GeoPoint, ...]) -> None:
        self._points = tuple(snapshot)

    def __repr__(self) -> str:
        return f"PointSequence({len(self._points)} points)"
