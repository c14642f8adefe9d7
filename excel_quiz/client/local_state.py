"""Persisted key/value state for the client (survives restarts)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from excel_quiz.utils.json_utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)

PAGE_KEY = "excelQuizPage"
SELECTED_CHAPTER_KEY = "excelQuizSelectedChapter"
ANSWERS_KEY = "excelQuizAnswers"
HISTORY_KEY = "excelQuizHistory"
AUTH_TOKEN_KEY = "excelQuizAuthToken"


class LocalStateStore:
    """A small JSON file keyed by stable names; every write hits the disk."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data = self._load()

    def _load(self) -> dict[str, Any]:
        try:
            data = read_json_file(self.path, {})
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable client state {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def update(self, values: dict[str, Any]) -> None:
        self._data.update(values)
        self._flush()

    def remove(self, *keys: str) -> None:
        changed = False
        for key in keys:
            if key in self._data:
                del self._data[key]
                changed = True
        if changed:
            self._flush()

    def _flush(self) -> None:
        write_json_file(self.path, self._data)
