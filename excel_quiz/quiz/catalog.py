"""
Static chapter catalog.

Chapters are loaded once from a JSON file and validated up front so that a
malformed answer key fails at start-up, never while grading.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Union

from excel_quiz.errors import ConfigurationError
from excel_quiz.utils.json_utils import read_json_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlankRef:
    """Reference to an answer slot inside the question text."""

    blank_id: str


QuestionSegment = Union[str, BlankRef]


@dataclass(frozen=True)
class Chapter:
    id: int
    title: str
    problem_description: str
    question_segments: tuple[QuestionSegment, ...]
    blanks_in_order: tuple[str, ...]
    choices: tuple[str, ...]
    correct_answers: dict[str, str]

    @property
    def blank_count(self) -> int:
        return len(self.blanks_in_order)


def segment_to_payload(segment: QuestionSegment) -> str | dict[str, str]:
    if isinstance(segment, BlankRef):
        return {"blankId": segment.blank_id}
    return segment


def segment_from_payload(raw: Any) -> QuestionSegment:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict) and isinstance(raw.get("blankId"), str):
        return BlankRef(raw["blankId"])
    raise ConfigurationError(f"Invalid question segment: {raw!r}")


def segments_to_payload(segments) -> list[str | dict[str, str]]:
    return [segment_to_payload(segment) for segment in segments]


def segments_from_payload(raw: Any) -> tuple[QuestionSegment, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(segment_from_payload(item) for item in raw)


def validate_chapter(chapter: Chapter) -> None:
    """Check the answer-key invariants of a single chapter.

    Raises:
        ConfigurationError: if blanks, answer key, segments or choices disagree.
    """
    label = f"Chapter {chapter.id}"
    if not chapter.blanks_in_order:
        raise ConfigurationError(f"{label} has no blanks")
    if len(set(chapter.blanks_in_order)) != len(chapter.blanks_in_order):
        raise ConfigurationError(f"{label} lists a blank more than once")

    blanks = set(chapter.blanks_in_order)
    keys = set(chapter.correct_answers)
    if keys != blanks:
        missing = sorted(blanks - keys)
        extra = sorted(keys - blanks)
        raise ConfigurationError(
            f"{label} answer key mismatch (missing={missing}, extra={extra})"
        )

    for segment in chapter.question_segments:
        if isinstance(segment, BlankRef) and segment.blank_id not in blanks:
            raise ConfigurationError(
                f"{label} references unknown blank {segment.blank_id!r}"
            )

    choices = set(chapter.choices)
    for blank_id, answer in chapter.correct_answers.items():
        if answer not in choices:
            raise ConfigurationError(
                f"{label} correct answer for {blank_id!r} is not a choice: {answer!r}"
            )


def chapter_from_payload(raw: dict[str, Any]) -> Chapter:
    try:
        chapter = Chapter(
            id=int(raw["id"]),
            title=str(raw["title"]),
            problem_description=str(raw.get("problemDescription", "")),
            question_segments=segments_from_payload(raw.get("questionSegments")),
            blanks_in_order=tuple(str(b) for b in raw.get("blanksInOrder", [])),
            choices=tuple(str(c) for c in raw.get("choices", [])),
            correct_answers={
                str(k): str(v) for k, v in (raw.get("correctAnswers") or {}).items()
            },
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid chapter definition: {e}") from e
    validate_chapter(chapter)
    return chapter


def chapter_to_payload(chapter: Chapter, include_answers: bool = True) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": chapter.id,
        "title": chapter.title,
        "problemDescription": chapter.problem_description,
        "questionSegments": segments_to_payload(chapter.question_segments),
        "blanksInOrder": list(chapter.blanks_in_order),
        "choices": list(chapter.choices),
    }
    if include_answers:
        payload["correctAnswers"] = dict(chapter.correct_answers)
    return payload


class Catalog:
    """Ordered, immutable collection of chapters."""

    def __init__(self, chapters: list[Chapter]):
        by_id: dict[int, Chapter] = {}
        for chapter in chapters:
            if chapter.id in by_id:
                raise ConfigurationError(f"Duplicate chapter id {chapter.id}")
            by_id[chapter.id] = chapter
        self._chapters = tuple(chapters)
        self._by_id = by_id

    @property
    def chapters(self) -> tuple[Chapter, ...]:
        return self._chapters

    def get(self, chapter_id: int | None) -> Chapter | None:
        if chapter_id is None:
            return None
        return self._by_id.get(chapter_id)

    def __iter__(self) -> Iterator[Chapter]:
        return iter(self._chapters)

    def __len__(self) -> int:
        return len(self._chapters)

    def __contains__(self, chapter_id: object) -> bool:
        return chapter_id in self._by_id


def catalog_from_payload(payload: Any) -> Catalog:
    if isinstance(payload, dict):
        payload = payload.get("chapters")
    if not isinstance(payload, list) or not payload:
        raise ConfigurationError("Chapter catalog is empty")
    return Catalog([chapter_from_payload(item) for item in payload])


def load_catalog(path: Path) -> Catalog:
    """Load and validate the chapter catalog from a JSON file."""
    if not path.exists():
        raise ConfigurationError(f"Chapter catalog not found: {path}")
    try:
        payload = read_json_file(path, [])
    except ValueError as e:
        raise ConfigurationError(f"Chapter catalog is not valid JSON: {e}") from e
    catalog = catalog_from_payload(payload)
    logger.info(f"Loaded {len(catalog)} chapters from {path}")
    return catalog
