"""Tests for planar projection variants."""

import pytest

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from field_survey.core.geodesy.projection import (
    ApproximateFallback,
    PlanarCoordinate,
    TrueProjection,
    make_projector,
    utm_zone,
)


class TestUtmZone:

    @pytest.mark.parametrize("lng, zone", [
        (-180.0, 1),
        (-177.0, 1),
        (0.0, 31),
        (3.0, 31),
        (18.4, 34),
        (179.9, 60),
        (180.0, 60),
    ])
    def test_zone(self, lng, zone):
        assert utm_zone(lng) == zone


class TestTrueProjection:
    """Tests for the pyproj-backed UTM projection."""

    def test_central_meridian_easting(self):
        """Points on a zone's central meridian have easting 500000."""
        c = TrueProjection().to_planar(45.0, 9.0)
        assert c.ok
        assert c.zone == 32
        assert c.hemisphere == "N"
        assert c.easting == pytest.approx(500000.0, abs=1e-3)

    def test_southern_hemisphere_false_northing(self):
        c = TrueProjection().to_planar(-0.0001, 9.0)
        assert c.hemisphere == "S"
        assert c.northing == pytest.approx(10_000_000.0, abs=20.0)

    def test_forced_zone(self):
        """A pinned zone projects outside the point's own zone."""
        proj = TrueProjection()
        own = proj.to_planar(45.0, 12.1)
        pinned = proj.to_planar(45.0, 12.1, zone=32, hemisphere="N")
        assert own.zone == 33
        assert pinned.zone == 32
        assert pinned.easting != pytest.approx(own.easting)

    def test_invalid_input_is_flagged_not_raised(self):
        c = TrueProjection().to_planar(float("nan"), 10.0)
        assert c.ok is False
        assert (c.easting, c.northing) == (0.0, 0.0)

    def test_out_of_range_input_is_flagged(self):
        assert TrueProjection().to_planar(91.0, 10.0).ok is False

    def test_is_true_projection(self):
        assert TrueProjection().is_true_projection is True


class TestApproximateFallback:

    def test_scaling(self):
        c = ApproximateFallback().to_planar(1.0, 2.0)
        assert c == PlanarCoordinate(easting=222640.0, northing=110574.0, zone=0, hemisphere="N")

    def test_monotonic(self):
        proj = ApproximateFallback()
        a = proj.to_planar(10.0, 10.0)
        b = proj.to_planar(10.001, 10.001)
        assert b.easting > a.easting
        assert b.northing > a.northing

    def test_invalid(self):
        assert ApproximateFallback().to_planar(0.0, 200.0).ok is False

    def test_is_not_true_projection(self):
        assert ApproximateFallback().is_true_projection is False


class TestMakeProjector:

    def test_variants(self):
        assert isinstance(make_projector("utm"), TrueProjection)
        assert isinstance(make_projector("Approximate"), ApproximateFallback)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown projection"):
            make_projector("lambert")
