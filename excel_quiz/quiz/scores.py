"""ScoreEntry: immutable record of one graded attempt."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from excel_quiz.quiz.catalog import QuestionSegment, segments_from_payload, segments_to_payload
from excel_quiz.quiz.field_map import payload_to_row, row_to_payload
from excel_quiz.utils.time_utils import format_timestamp, parse_iso_timestamp


@dataclass(frozen=True)
class ScoreEntry:
    chapter_id: int
    chapter_title: str
    score: int  # percentage 0-100
    date: datetime
    user_answers: dict[str, str]
    # Snapshots, not references to the live chapter
    correct_answers: dict[str, str]
    question_segments: tuple[QuestionSegment, ...] = ()
    choices: tuple[str, ...] = ()
    # Set once the entry exists in the durable store
    id: int | None = None
    user_id: str | None = None
    user_name: str | None = field(default=None, compare=False)

    @property
    def blanks(self) -> list[str]:
        """Blank IDs in snapshot order."""
        return list(self.correct_answers)

    def to_payload(self) -> dict[str, Any]:
        """camelCase payload, as stored in the local history mirror."""
        payload: dict[str, Any] = {
            "chapterId": self.chapter_id,
            "chapterTitle": self.chapter_title,
            "score": self.score,
            "date": format_timestamp(self.date),
            "userAnswers": dict(self.user_answers),
            "correctAnswers": dict(self.correct_answers),
            "questionSegments": segments_to_payload(self.question_segments),
            "choices": list(self.choices),
        }
        if self.id is not None:
            payload["id"] = self.id
        if self.user_id is not None:
            payload["userId"] = self.user_id
        if self.user_name is not None:
            payload["userName"] = self.user_name
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ScoreEntry":
        """Build an entry from a camelCase payload.

        Raises:
            ValueError: if required fields are missing or malformed.
        """
        date = parse_iso_timestamp(payload.get("date"))
        if date is None:
            raise ValueError(f"Invalid score date: {payload.get('date')!r}")
        try:
            chapter_id = int(payload["chapterId"])
            score = int(payload["score"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid score entry: {e}") from e
        raw_id = payload.get("id")
        user_id = payload.get("userId")
        return cls(
            chapter_id=chapter_id,
            chapter_title=str(payload.get("chapterTitle") or ""),
            score=score,
            date=date,
            user_answers=dict(payload.get("userAnswers") or {}),
            correct_answers=dict(payload.get("correctAnswers") or {}),
            question_segments=segments_from_payload(payload.get("questionSegments")),
            choices=tuple(payload.get("choices") or ()),
            id=int(raw_id) if raw_id is not None else None,
            user_id=str(user_id) if user_id is not None else None,
            user_name=payload.get("userName"),
        )

    def to_row(self) -> dict[str, Any]:
        """snake_case record for the durable store."""
        return payload_to_row(self.to_payload())

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ScoreEntry":
        return cls.from_payload(row_to_payload(row))

    def copy_with(self, **changes: Any) -> "ScoreEntry":
        values = {
            "chapter_id": self.chapter_id,
            "chapter_title": self.chapter_title,
            "score": self.score,
            "date": self.date,
            "user_answers": copy.deepcopy(self.user_answers),
            "correct_answers": copy.deepcopy(self.correct_answers),
            "question_segments": self.question_segments,
            "choices": self.choices,
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
        }
        values.update(changes)
        return ScoreEntry(**values)
