"""Import normalization and survey storage (no UI dependencies)."""

from .normalize import load_document, export_document, normalize_point, normalize_survey
from .repository import SurveyRepository, InMemorySurveyRepository, JsonFileSurveyRepository

__all__ = [
    "load_document",
    "export_document",
    "normalize_point",
    "normalize_survey",
    "SurveyRepository",
    "InMemorySurveyRepository",
    "JsonFileSurveyRepository",
]
