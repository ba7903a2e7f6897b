"""Tests for PointSequence ordering and re-derivation."""

import pytest

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from field_survey.core.geodesy.primitives import bearing, distance
from field_survey.core.models.point import GeoPoint, PointKind
from field_survey.core.models.sequence import PointSequence, rederive


def _pt(pid, lat, lng, **kw):
    return GeoPoint(id=pid, lat=lat, lng=lng, **kw)


@pytest.fixture
def line():
    """Three points heading east along the equator, ~111 m apart."""
    seq = PointSequence()
    seq.append(_pt("A", 0.0, 0.0))
    seq.append(_pt("B", 0.0, 0.001))
    seq.append(_pt("C", 0.0, 0.002))
    return seq


def assert_consistent(seq):
    """Every point's derived fields are relative to its predecessor."""
    for i, p in enumerate(seq):
        if i == 0:
            assert (p.distance, p.bearing) == (0.0, 0.0)
            continue
        prev = seq[i - 1]
        assert p.distance == pytest.approx(distance(prev.lat, prev.lng, p.lat, p.lng))
        assert p.bearing == pytest.approx(bearing(prev.lat, prev.lng, p.lat, p.lng))


class TestAppend:

    def test_derives_from_predecessor(self, line):
        assert len(line) == 3
        assert line[1].bearing == pytest.approx(90.0)
        assert line[1].distance == pytest.approx(111.195, abs=0.01)
        assert_consistent(line)

    def test_duplicate_id_raises_error(self, line):
        with pytest.raises(ValueError, match="already exists"):
            line.append(_pt("A", 1.0, 1.0))

    def test_invalid_point_gets_neutral_fields(self, line):
        stored = line.append(_pt("X", float("nan"), 0.0))
        assert (stored.distance, stored.bearing) == (0.0, 0.0)

    def test_last(self, line):
        assert line.last.id == "C"
        assert PointSequence().last is None


class TestLookup:

    def test_find_and_get(self, line):
        assert line.find("B").id == "B"
        assert line.find("missing") is None
        assert line.find(None) is None
        assert line.get("C").id == "C"

    def test_get_missing_raises_error(self, line):
        with pytest.raises(KeyError, match="not found"):
            line.get("Z")

    def test_ids_compared_as_strings(self):
        seq = PointSequence([_pt("1", 0.0, 0.0)])
        assert seq.find(1) is not None
        assert seq.index_of(1) == 0

    def test_count_by_kind(self, line):
        line.append(_pt("G", 0.0, 0.003, kind=PointKind.GPS))
        assert line.count(PointKind.GPS) == 1
        assert line.count(PointKind.MANUAL) == 3


class TestMutation:
    """Every mutation re-derives the whole sequence."""

    def test_remove_middle(self, line):
        removed = line.remove("B")
        assert removed.id == "B"
        assert [p.id for p in line] == ["A", "C"]
        assert line[1].distance == pytest.approx(222.39, abs=0.01)
        assert_consistent(line)

    def test_remove_first_resets_new_first(self, line):
        line.remove("A")
        assert (line[0].distance, line[0].bearing) == (0.0, 0.0)

    def test_move_updates_following_point(self, line):
        line.move("B", 0.001, 0.001)
        assert line.get("B").bearing == pytest.approx(45.0, abs=0.01)
        assert line.get("C").bearing == pytest.approx(135.0, abs=0.01)
        assert_consistent(line)

    def test_insert(self, line):
        line.insert(1, _pt("AB", 0.0005, 0.0005))
        assert [p.id for p in line] == ["A", "AB", "B", "C"]
        assert_consistent(line)

    def test_missing_id_raises_and_leaves_sequence(self, line):
        before = line.snapshot()
        with pytest.raises(KeyError):
            line.move("Z", 1.0, 1.0)
        assert line.snapshot() == before

    def test_collinearity_is_kept_on_rederive(self, line):
        seq = PointSequence([line[0], line[1].evolve(collinearity_error=2.5)])
        seq.move("A", 0.0, -0.001)
        assert seq.get("B").collinearity_error == 2.5

    def test_snapshot_restore(self, line):
        snap = line.snapshot()
        line.clear()
        assert len(line) == 0
        line.restore(snap)
        assert len(line) == 3


class TestRederive:

    def test_loading_without_derivation_keeps_fields(self):
        stale = [_pt("A", 0.0, 0.0, distance=5.0, bearing=7.0)]
        assert PointSequence(stale, derive=False)[0].distance == 5.0
        assert PointSequence(stale)[0].distance == 0.0

    def test_function(self):
        pts = rederive([_pt("A", 0.0, 0.0), _pt("B", 0.001, 0.0)])
        assert pts[1].bearing == pytest.approx(0.0, abs=1e-9)
