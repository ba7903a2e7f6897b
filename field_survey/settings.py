"""Persistent survey settings.

This module provides a centralized settings manager that:
- Stores user preferences in a JSON file (or in memory when no path is given)
- Provides defaults used by the survey service
- Validates and clamps values to safe ranges
- Tolerates corrupted or hand-edited files by falling back to defaults
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .core.geodesy.projection import Projector, make_projector
from .core.models.session import StakingSession

logger = logging.getLogger(__name__)


# =============================================================================
# Type conversion helpers
# =============================================================================

def _to_bool(v: Any) -> bool:
    """Boolean conversion for values read back from JSON or user input."""
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "y", "t")
    return bool(v)


def _to_float(v: Any) -> float:
    return float(v)


def _to_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v)


# =============================================================================
# Validators / Clamps
# =============================================================================

def _clamp(min_val: float, max_val: float) -> Callable[[float], float]:
    """Return a clamping function for numeric values."""
    def clamp(v: float) -> float:
        return max(min_val, min(max_val, v))
    return clamp


def _one_of(valid_values: Tuple[str, ...], fallback: str) -> Callable[[str], str]:
    """Return a function that validates string is one of allowed values."""
    def validate(v: str) -> str:
        v_lower = v.lower().strip()
        if v_lower in valid_values:
            return v_lower
        return fallback
    return validate


# Format: key -> (converter, validator_or_None)
VALIDATORS: Dict[str, Tuple[Callable, Optional[Callable]]] = {
    # GPS averaging
    "gps_accuracy_threshold": (_to_float, _clamp(0.1, 1000.0)),
    "averaging_duration_s": (_to_float, _clamp(1.0, 600.0)),

    # Staking
    "collinearity_tolerance": (_to_float, _clamp(0.0, 90.0)),
    "strict_collinearity": (_to_bool, None),
    "default_corner_angle": (_to_float, _clamp(0.0, 360.0)),

    # Area computation
    "projection": (_to_str, _one_of(("utm", "approximate"), "utm")),
}


# =============================================================================
# Defaults dataclass
# =============================================================================

@dataclass(frozen=True)
class _Defaults:
    """Default values for all settings."""

    gps_accuracy_threshold: float = 5.0   # meters
    averaging_duration_s: float = 20.0    # seconds

    collinearity_tolerance: float = 1.0   # degrees
    strict_collinearity: bool = False
    default_corner_angle: float = 90.0    # degrees

    projection: str = "utm"               # utm, approximate


# =============================================================================
# Main settings class
# =============================================================================

class SurveySettings:
    """
    Validated settings store.

    Usage:
        settings = SurveySettings("~/.field_survey/settings.json")
        threshold = settings.get("gps_accuracy_threshold")
        settings.set("strict_collinearity", True)
        settings.reset("strict_collinearity")
    """

    DEFAULTS = _Defaults()

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path).expanduser() if path is not None else None
        self._store: Dict[str, Any] = self._read()

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _read(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self.path)
            return {}
        return data

    def _write(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._store, indent=2, sort_keys=True), encoding="utf-8")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @classmethod
    def _defaults_dict(cls) -> Dict[str, Any]:
        return cls.DEFAULTS.__dict__.copy()

    @classmethod
    def _convert_and_validate(cls, key: str, raw_value: Any, default: Any) -> Any:
        """Convert a raw value to the right type and clamp it; default on failure."""
        converter, validator = VALIDATORS[key]
        try:
            value = converter(raw_value)
        except (TypeError, ValueError):
            return default
        if validator is not None:
            value = validator(value)
        return value

    def get(self, key: str) -> Any:
        """
        Get a setting value, converted and validated.

        Raises:
            KeyError: If the key is not a valid setting
        """
        defaults = self._defaults_dict()
        if key not in defaults:
            raise KeyError(f"Unknown setting key: {key}")
        default = defaults[key]
        if key not in self._store:
            return default
        return self._convert_and_validate(key, self._store[key], default)

    def set(self, key: str, value: Any) -> None:
        """
        Validate and store a setting value.

        Raises:
            KeyError: If the key is not a valid setting
        """
        defaults = self._defaults_dict()
        if key not in defaults:
            raise KeyError(f"Unknown setting key: {key}")
        self._store[key] = self._convert_and_validate(key, value, defaults[key])
        self._write()

    def reset(self, key: Union[str, None] = None) -> None:
        """
        Reset one setting, or all settings when key is None.

        Raises:
            KeyError: If the key is not a valid setting
        """
        if key is None:
            self._store.clear()
        else:
            if key not in self._defaults_dict():
                raise KeyError(f"Unknown setting key: {key}")
            self._store.pop(key, None)
        self._write()

    def all(self) -> Dict[str, Any]:
        """Get all settings as a dictionary (all values validated)."""
        return {k: self.get(k) for k in self._defaults_dict()}

    @classmethod
    def keys(cls) -> list:
        return list(cls._defaults_dict().keys())

    def is_default(self, key: str) -> bool:
        return self.get(key) == self.get_default(key)

    @classmethod
    def get_default(cls, key: str) -> Any:
        defaults = cls._defaults_dict()
        if key not in defaults:
            raise KeyError(f"Unknown setting key: {key}")
        return defaults[key]

    def computation_snapshot(self) -> Dict[str, Any]:
        """Settings that affect computed results, for diagnostics."""
        return {
            "gps_accuracy_threshold": self.get("gps_accuracy_threshold"),
            "collinearity_tolerance": self.get("collinearity_tolerance"),
            "strict_collinearity": self.get("strict_collinearity"),
            "projection": self.get("projection"),
        }

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def new_staking_session(self) -> StakingSession:
        """A fresh (inactive) staking session configured from settings."""
        return StakingSession(
            strict_collinearity=self.get("strict_collinearity"),
            tolerance_degrees=self.get("collinearity_tolerance"),
        )

    def make_projector(self) -> Projector:
        return make_projector(self.get("projection"))
