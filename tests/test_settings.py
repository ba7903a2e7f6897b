"""Tests for SurveySettings."""

import json

import pytest

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from field_survey.core.geodesy.projection import ApproximateFallback, TrueProjection
from field_survey.settings import SurveySettings


class TestDefaults:

    def test_defaults(self):
        s = SurveySettings()
        assert s.get("gps_accuracy_threshold") == 5.0
        assert s.get("averaging_duration_s") == 20.0
        assert s.get("collinearity_tolerance") == 1.0
        assert s.get("strict_collinearity") is False
        assert s.get("projection") == "utm"
        assert all(s.is_default(k) for k in SurveySettings.keys())

    def test_unknown_key(self):
        s = SurveySettings()
        with pytest.raises(KeyError, match="Unknown setting key"):
            s.get("nope")
        with pytest.raises(KeyError):
            s.set("nope", 1)


class TestValidation:

    def test_numeric_values_are_clamped(self):
        s = SurveySettings()
        s.set("collinearity_tolerance", 500)
        assert s.get("collinearity_tolerance") == 90.0
        s.set("gps_accuracy_threshold", -3)
        assert s.get("gps_accuracy_threshold") == 0.1

    def test_strings_are_converted(self):
        s = SurveySettings()
        s.set("strict_collinearity", "yes")
        assert s.get("strict_collinearity") is True
        s.set("averaging_duration_s", "30")
        assert s.get("averaging_duration_s") == 30.0

    def test_bad_value_falls_back_to_default(self):
        s = SurveySettings()
        s.set("averaging_duration_s", "soon")
        assert s.get("averaging_duration_s") == 20.0

    def test_projection_choice(self):
        s = SurveySettings()
        s.set("projection", " Approximate ")
        assert s.get("projection") == "approximate"
        assert isinstance(s.make_projector(), ApproximateFallback)
        s.set("projection", "mercator")
        assert s.get("projection") == "utm"
        assert isinstance(s.make_projector(), TrueProjection)

    def test_reset(self):
        s = SurveySettings()
        s.set("strict_collinearity", True)
        s.set("collinearity_tolerance", 3)
        s.reset("strict_collinearity")
        assert s.get("strict_collinearity") is False
        assert s.get("collinearity_tolerance") == 3.0
        s.reset()
        assert s.get("collinearity_tolerance") == 1.0


class TestPersistence:

    def test_round_trip(self, tmp_path):
        path = tmp_path / "settings.json"
        SurveySettings(path).set("collinearity_tolerance", 2.5)
        assert SurveySettings(path).get("collinearity_tolerance") == 2.5

    def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        s = SurveySettings(path)
        assert s.get("collinearity_tolerance") == 1.0

    def test_hand_edited_out_of_range_value(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"default_corner_angle": 720}), encoding="utf-8")
        assert SurveySettings(path).get("default_corner_angle") == 360.0


class TestFactories:

    def test_new_staking_session(self):
        s = SurveySettings()
        s.set("strict_collinearity", True)
        s.set("collinearity_tolerance", 2.0)
        session = s.new_staking_session()
        assert session.strict_collinearity is True
        assert session.tolerance_degrees == 2.0
        assert session.is_active is False

    def test_computation_snapshot(self):
        snap = SurveySettings().computation_snapshot()
        assert snap["projection"] == "utm"
        assert "averaging_duration_s" not in snap
