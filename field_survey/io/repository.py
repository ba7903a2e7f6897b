"""Survey storage.

The application layer receives a :class:`SurveyRepository`; the core never
touches storage. Two implementations are provided:

- :class:`InMemorySurveyRepository` for tests and ephemeral sessions
- :class:`JsonFileSurveyRepository` storing every survey in one JSON document
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.models.survey import Survey
from .normalize import export_document, load_document

logger = logging.getLogger(__name__)


class SurveyRepository(ABC):
    """Load/save interface for surveys."""

    @abstractmethod
    def load(self) -> List[Survey]:
        """All stored surveys."""

    @abstractmethod
    def save(self, survey: Survey) -> None:
        """Insert or replace a survey by id."""

    @abstractmethod
    def delete(self, survey_id: str) -> None:
        """
        Remove a survey.

        Raises:
            KeyError: If the survey does not exist
        """

    def get(self, survey_id: str) -> Optional[Survey]:
        for s in self.load():
            if s.id == str(survey_id):
                return s
        return None


class InMemorySurveyRepository(SurveyRepository):
    """Keeps serialized copies so callers cannot mutate stored state."""

    def __init__(self) -> None:
        self._records: Dict[str, dict] = {}

    def load(self) -> List[Survey]:
        return [Survey.from_dict(r) for r in self._records.values()]

    def save(self, survey: Survey) -> None:
        self._records[survey.id] = survey.to_dict()

    def delete(self, survey_id: str) -> None:
        if str(survey_id) not in self._records:
            raise KeyError(f"Survey '{survey_id}' not found")
        del self._records[str(survey_id)]


class JsonFileSurveyRepository(SurveyRepository):
    """All surveys in one JSON file, written atomically via a temp file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read_all(self) -> Dict[str, Survey]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        surveys = load_document(text)
        logger.debug("Loaded %d surveys from %s", len(surveys), self.path)
        return {s.id: s for s in surveys}

    def _write_all(self, surveys: Dict[str, Survey]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(export_document(list(surveys.values())), indent=2), encoding="utf-8")
        os.replace(tmp, self.path)
        logger.debug("Saved %d surveys to %s", len(surveys), self.path)

    def load(self) -> List[Survey]:
        return list(self._read_all().values())

    def save(self, survey: Survey) -> None:
        surveys = self._read_all()
        surveys[survey.id] = survey
        self._write_all(surveys)

    def delete(self, survey_id: str) -> None:
        surveys = self._read_all()
        if str(survey_id) not in surveys:
            raise KeyError(f"Survey '{survey_id}' not found")
        del surveys[str(survey_id)]
        self._write_all(surveys)
