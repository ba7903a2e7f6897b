"""Tests for the geodetic primitives."""

import math
import pytest

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from field_survey.core.geodesy.primitives import (
    EARTH_RADIUS_M,
    bearing,
    distance,
    format_acres,
    format_area,
    format_bearing,
    format_distance,
    normalize_angle,
    parse_coordinate_query,
    signed_angle_difference,
)


# One thousandth of a degree along a great circle on the 6,371 km sphere
MILLIDEGREE_M = EARTH_RADIUS_M * math.radians(0.001)


class TestDistance:
    """Tests for haversine distance."""

    def test_coincident_points(self):
        """Distance between identical points is exactly zero."""
        assert distance(12.5, -45.25, 12.5, -45.25) == 0.0

    def test_east_along_equator(self):
        """0.001 degree of longitude on the equator."""
        d = distance(0.0, 0.0, 0.0, 0.001)
        assert d == pytest.approx(MILLIDEGREE_M, rel=1e-3)
        assert d == pytest.approx(111.195, abs=0.01)

    def test_north_along_meridian(self):
        d = distance(0.0, 0.0, 0.001, 0.0)
        assert d == pytest.approx(MILLIDEGREE_M, rel=1e-3)

    def test_symmetric(self):
        assert distance(45.0, 7.0, 45.01, 7.02) == pytest.approx(distance(45.01, 7.02, 45.0, 7.0))

    def test_antipodal_points_do_not_produce_nan(self):
        """Floating overshoot of the half-chord is clamped."""
        d = distance(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-9)

    @pytest.mark.parametrize("args", [
        (float("nan"), 0.0, 1.0, 1.0),
        (0.0, float("nan"), 1.0, 1.0),
        (0.0, 0.0, float("inf"), 1.0),
    ])
    def test_non_finite_input_gives_zero(self, args):
        assert distance(*args) == 0.0


class TestBearing:
    """Tests for initial bearing."""

    def test_due_north(self):
        assert bearing(0.0, 0.0, 0.001, 0.0) == pytest.approx(0.0, abs=1e-9)

    def test_due_east(self):
        assert bearing(0.0, 0.0, 0.0, 0.001) == pytest.approx(90.0, abs=1e-9)

    def test_due_south(self):
        assert bearing(0.001, 0.0, 0.0, 0.0) == pytest.approx(180.0, abs=1e-9)

    def test_due_west(self):
        assert bearing(0.0, 0.001, 0.0, 0.0) == pytest.approx(270.0, abs=1e-9)

    def test_coincident_points_give_zero(self):
        b = bearing(10.0, 20.0, 10.0, 20.0)
        assert b == 0.0
        assert not math.isnan(b)

    def test_nan_input_gives_zero(self):
        assert bearing(float("nan"), 0.0, 1.0, 1.0) == 0.0

    @pytest.mark.parametrize("p, q", [
        ((0.0, 0.0), (0.0, 0.001)),
        ((0.0, 0.0), (0.001, 0.0)),
        ((45.0, 7.0), (45.001, 7.001)),
        ((-33.9, 18.4), (-33.9012, 18.4031)),
    ])
    def test_reverse_bearing_differs_by_180(self, p, q):
        """Forward and back bearings of nearby points are opposite."""
        forward = bearing(p[0], p[1], q[0], q[1])
        back = bearing(q[0], q[1], p[0], p[1])
        diff = normalize_angle(back - forward)
        assert diff == pytest.approx(180.0, abs=1e-2)

    def test_range(self):
        for lat2, lng2 in [(1, 1), (-1, 1), (-1, -1), (1, -1)]:
            b = bearing(0.0, 0.0, lat2, lng2)
            assert 0.0 <= b < 360.0


class TestNormalizeAngle:
    """Tests for angle normalization."""

    @pytest.mark.parametrize("angle, expected", [
        (0.0, 0.0),
        (360.0, 0.0),
        (-90.0, 270.0),
        (450.0, 90.0),
        (-720.5, 359.5),
        (1e6, 1e6 % 360),
    ])
    def test_values(self, angle, expected):
        assert normalize_angle(angle) == pytest.approx(expected)

    @pytest.mark.parametrize("angle", [-1e-20, -1e-300, -0.0, 359.9999999999, -359.999, 7200.25])
    def test_idempotent_and_in_range(self, angle):
        once = normalize_angle(angle)
        assert 0.0 <= once < 360.0
        assert normalize_angle(once) == once

    def test_non_finite(self):
        assert normalize_angle(float("nan")) == 0.0
        assert normalize_angle(float("inf")) == 0.0


class TestSignedAngleDifference:

    def test_wraps_across_north(self):
        assert signed_angle_difference(5.0, 355.0) == pytest.approx(10.0)
        assert signed_angle_difference(355.0, 5.0) == pytest.approx(-10.0)

    def test_half_turn_is_positive(self):
        """The range is (-180, 180]."""
        assert signed_angle_difference(180.0, 0.0) == pytest.approx(180.0)
        assert signed_angle_difference(0.0, 180.0) == pytest.approx(180.0)


class TestFormatBearing:
    """Tests for compass formatting."""

    def test_north(self):
        assert format_bearing(0.0) == "N 0°0'"

    def test_east_with_minutes(self):
        assert format_bearing(90.5) == "E 90°30'"

    def test_minutes_are_truncated(self):
        """45.999° is 45°59', not 46°0'."""
        assert format_bearing(45.999) == "NE 45°59'"

    def test_cardinal_rounds_to_nearest_point(self):
        assert format_bearing(11.25).startswith("NNE ")
        assert format_bearing(11.2).startswith("N ")
        assert format_bearing(348.75).startswith("N ")
        assert format_bearing(200.0).startswith("SSW ")

    def test_nan(self):
        assert format_bearing(float("nan")) == "-"


class TestDisplayHelpers:

    def test_format_area_square_meters(self):
        assert format_area(5000.0) == "5000.0 m²"

    def test_format_area_hectares(self):
        assert format_area(25000.0) == "2.500 ha"

    def test_format_acres(self):
        assert format_acres(4046.86) == "1.000 ac"

    def test_format_distance(self):
        assert format_distance(12.34) == "12.3 m"
        assert format_distance(1500.0) == "1.500 km"

    def test_nan_formatting(self):
        assert format_area(float("nan")) == "0 m²"
        assert format_acres(float("nan")) == "0 ac"


class TestCoordinateQuery:

    def test_parses_pair(self):
        assert parse_coordinate_query("-33.92, 18.42") == (-33.92, 18.42)

    def test_out_of_range(self):
        assert parse_coordinate_query("95, 10") is None

    def test_place_name(self):
        assert parse_coordinate_query("Cape Town") is None
        assert parse_coordinate_query("") is None
