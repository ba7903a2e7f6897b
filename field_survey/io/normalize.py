"""Normalization of loosely-typed survey data.

Imported or legacy survey documents may carry numeric point ids, mixed-case
point types, alternative key names, or no labels at all. Everything passes
through this module before it reaches the core, which only ever sees strict
:class:`~field_survey.core.models.point.GeoPoint` records.

Supported documents:
- a backup/export wrapper ``{"surveys": [...]}``
- a single survey ``{"id": ..., "points": [...]}``
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..core.models.point import GeoPoint, PointKind, TurnDirection, new_point_id, now_ms
from ..core.models.sequence import PointSequence
from ..core.models.survey import Survey

logger = logging.getLogger(__name__)


FALLBACK_KIND = PointKind.MANUAL


def _get(row: Mapping[str, Any], keys: Sequence[str], default: Any = None) -> Any:
    for k in keys:
        if k in row and row[k] is not None and row[k] != "":
            return row[k]
    return default


def _parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    s = str(value).strip().lower()
    if s in {"1", "true", "t", "yes", "y"}:
        return True
    if s in {"0", "false", "f", "no", "n"}:
        return False
    return default


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "" or value == "None":
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _coordinate(value: Any) -> float:
    """Coordinates keep NaN so the point is flagged invalid rather than moved."""
    if value is None or value == "":
        raise ValueError("missing coordinate")
    return float(value)


def parse_kind(value: Any) -> PointKind:
    """Case-insensitive point kind; unrecognized values map to MANUAL."""
    if isinstance(value, PointKind):
        return value
    text = str(value or "").strip().upper()
    try:
        return PointKind(text)
    except ValueError:
        return FALLBACK_KIND


def parse_turn_direction(value: Any) -> Optional[TurnDirection]:
    text = str(value or "").strip().lower()
    if text in {"left", "l"}:
        return TurnDirection.LEFT
    if text in {"right", "r"}:
        return TurnDirection.RIGHT
    return None


def default_label(kind: PointKind, point_id: str, index: int) -> str:
    """Label for a point that was stored without one."""
    if kind == PointKind.GPS:
        return chr(65 + (index % 26))
    if kind == PointKind.MANUAL:
        return f"M{point_id[:1]}"
    if kind == PointKind.STAKING:
        return f"S{point_id[:1]}"
    return str(index + 1)


def normalize_point(raw: Mapping[str, Any], index: int = 0) -> GeoPoint:
    """
    Build a strict GeoPoint from a loosely-typed record.

    Args:
        raw: Point record (keys such as lat/latitude, lng/lon/longitude, type/kind)
        index: Position of the point in its survey (used for default labels)

    Raises:
        ValueError: If the record has no usable coordinates
    """
    raw_id = _get(raw, ["id", "point_id", "pid"])
    point_id = str(raw_id) if raw_id is not None else new_point_id()
    kind = parse_kind(_get(raw, ["type", "kind", "pointType"]))

    lat = _coordinate(_get(raw, ["lat", "latitude", "y"]))
    lng = _coordinate(_get(raw, ["lng", "lon", "long", "longitude", "x"]))

    label = _get(raw, ["label"])
    accuracy = _optional_float(_get(raw, ["accuracy", "accuracy_m", "acc"]))
    if accuracy is not None and accuracy < 0:
        accuracy = None

    timestamp = _optional_float(_get(raw, ["timestamp", "time", "ts"]))

    return GeoPoint(
        id=point_id,
        lat=lat,
        lng=lng,
        kind=kind,
        timestamp=int(timestamp) if timestamp is not None else now_ms(),
        altitude=_optional_float(_get(raw, ["altitude", "alt", "elevation"])),
        accuracy=accuracy,
        label=str(label) if label is not None else default_label(kind, point_id, index),
        name=_get(raw, ["name"]),
        collinearity_error=_optional_float(_get(raw, ["collinearityError", "collinearity_error"])),
        turn_direction=parse_turn_direction(_get(raw, ["turnDirection", "turn_direction"])),
        is_snapped=_parse_bool(_get(raw, ["isSnapped", "is_snapped"]), default=False),
    )


def normalize_survey(raw: Mapping[str, Any]) -> Survey:
    """
    Build a Survey from a loosely-typed record.

    Points without usable coordinates are skipped with a warning; distance
    and bearing are re-derived for the remaining sequence.

    Raises:
        ValueError: If the record is not a survey
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"Survey record must be an object, got {type(raw).__name__}")
    raw_points = raw.get("points")
    if raw_points is None or not isinstance(raw_points, list):
        raise ValueError(f"Survey record {raw.get('id')!r} has no points list")

    points: List[GeoPoint] = []
    for i, rp in enumerate(raw_points):
        if not isinstance(rp, Mapping):
            logger.warning("Skipping non-object point #%d in survey %r", i, raw.get("id"))
            continue
        try:
            points.append(normalize_point(rp, len(points)))
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping point #%d in survey %r: %s", i, raw.get("id"), exc)

    raw_id = raw.get("id")
    return Survey(
        id=str(raw_id) if raw_id not in (None, "") else new_point_id(),
        name=str(raw.get("name") or "Imported Survey"),
        points=PointSequence(points),
        created=int(_optional_float(raw.get("created")) or now_ms()),
        updated=int(_optional_float(raw.get("updated")) or now_ms()),
        is_staking=_parse_bool(raw.get("isStaking"), default=False),
        area=_optional_float(raw.get("area")),
        perimeter=_optional_float(raw.get("perimeter")),
    )


def load_document(data: Union[str, bytes, Mapping[str, Any]]) -> List[Survey]:
    """
    Parse an import document into surveys.

    Args:
        data: JSON text or an already-decoded object

    Raises:
        ValueError: If the document is neither a backup wrapper nor a survey
    """
    if isinstance(data, (str, bytes)):
        data = json.loads(data)

    if isinstance(data, Mapping) and isinstance(data.get("surveys"), list):
        surveys = []
        for i, raw in enumerate(data["surveys"]):
            try:
                surveys.append(normalize_survey(raw))
            except ValueError as exc:
                logger.warning("Skipping survey #%d: %s", i, exc)
        return surveys

    if isinstance(data, Mapping) and "id" in data and "points" in data:
        return [normalize_survey(data)]

    raise ValueError("Unrecognized survey document: expected 'surveys' list or a single survey")


def export_document(surveys: Sequence[Survey]) -> Dict[str, Any]:
    """Wrap surveys in the backup document shape read by :func:`load_document`."""
    return {
        "exportDate": now_ms(),
        "surveys": [s.to_dict() for s in surveys],
    }
