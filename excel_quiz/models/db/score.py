"""
Score database model: one row per graded submission.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from excel_quiz.database import Base
from excel_quiz.utils.json_utils import load_json_text

if TYPE_CHECKING:
    from excel_quiz.models.db.user import User


class Score(Base):
    """
    Graded attempt.
    Answer key, question text and choices are snapshots taken at grading
    time so history survives later content edits.
    """

    __tablename__ = "scores"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Denormalized display name at submission time
    full_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    chapter_id: Mapped[int] = mapped_column(nullable=False, index=True)
    chapter_title: Mapped[str] = mapped_column(String(200), nullable=False)
    score: Mapped[int] = mapped_column(nullable=False)
    date: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    # Snapshots (stored as JSON strings)
    user_answers_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    correct_answers_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    question_segments_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    choices_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="scores")

    @property
    def user_answers(self) -> dict[str, str]:
        """Parse user answers from JSON."""
        return load_json_text(self.user_answers_json, {})

    @user_answers.setter
    def user_answers(self, value: dict[str, str]) -> None:
        """Serialize user answers to JSON."""
        self.user_answers_json = json.dumps(value or {}, ensure_ascii=False)

    @property
    def correct_answers(self) -> dict[str, str]:
        """Parse answer key snapshot from JSON."""
        return load_json_text(self.correct_answers_json, {})

    @correct_answers.setter
    def correct_answers(self, value: dict[str, str]) -> None:
        """Serialize answer key snapshot to JSON."""
        self.correct_answers_json = json.dumps(value or {}, ensure_ascii=False)

    @property
    def question_segments(self) -> list[Any]:
        """Parse question segments from JSON."""
        return load_json_text(self.question_segments_json, [])

    @question_segments.setter
    def question_segments(self, value: list[Any]) -> None:
        """Serialize question segments to JSON."""
        self.question_segments_json = json.dumps(value or [], ensure_ascii=False)

    @property
    def choices(self) -> list[str]:
        """Parse choices from JSON."""
        return load_json_text(self.choices_json, [])

    @choices.setter
    def choices(self, value: list[str]) -> None:
        """Serialize choices to JSON."""
        self.choices_json = json.dumps(value or [], ensure_ascii=False)

    def __repr__(self) -> str:
        return f"<Score(id={self.id}, user_id={self.user_id}, chapter_id={self.chapter_id}, score={self.score})>"
