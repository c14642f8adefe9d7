"""Grading of submitted answers against a chapter's answer key."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping

from excel_quiz.quiz.catalog import Chapter
from excel_quiz.quiz.scores import ScoreEntry
from excel_quiz.utils.time_utils import utc_now

UNANSWERED_LABEL = "(未回答)"


@dataclass(frozen=True)
class BlankResult:
    blank_id: str
    user_answer: str | None
    correct_answer: str
    is_correct: bool


def empty_answers(chapter: Chapter) -> dict[str, str]:
    """Initial answer sheet: every blank present and unselected."""
    return {blank_id: "" for blank_id in chapter.blanks_in_order}


def is_complete(chapter: Chapter, answers: Mapping[str, str]) -> bool:
    """True if every blank maps to a non-empty choice."""
    return all(answers.get(blank_id) for blank_id in chapter.blanks_in_order)


def count_correct(blanks, correct_answers: Mapping[str, str], answers: Mapping[str, str]) -> int:
    correct = 0
    for blank_id in blanks:
        # Missing answers never equal a correct answer
        if blank_id in answers and answers[blank_id] == correct_answers[blank_id]:
            correct += 1
    return correct


def percent(correct: int, total: int) -> int:
    """Round half up, matching the scores already stored."""
    return int(math.floor(correct / total * 100 + 0.5))


def grade(
    chapter: Chapter,
    answers: Mapping[str, str],
    now: datetime | None = None,
) -> ScoreEntry:
    """
    Grade answers for a chapter and build the score entry.

    Partial answers are graded as-is; empty chapters are rejected when the
    catalog is loaded, so ``blanks_in_order`` is never empty here.
    """
    blanks = chapter.blanks_in_order
    correct = count_correct(blanks, chapter.correct_answers, answers)
    return ScoreEntry(
        chapter_id=chapter.id,
        chapter_title=chapter.title,
        score=percent(correct, len(blanks)),
        date=now or utc_now(),
        user_answers=dict(answers),
        correct_answers={b: chapter.correct_answers[b] for b in blanks},
        question_segments=copy.deepcopy(chapter.question_segments),
        choices=tuple(chapter.choices),
    )


def blank_results(entry: ScoreEntry) -> list[BlankResult]:
    """Per-blank outcome of a graded entry, in answer-key order."""
    results = []
    for blank_id, correct_answer in entry.correct_answers.items():
        user_answer = entry.user_answers.get(blank_id) or None
        results.append(
            BlankResult(
                blank_id=blank_id,
                user_answer=user_answer,
                correct_answer=correct_answer,
                is_correct=user_answer == correct_answer,
            )
        )
    return results


def mistakes(entry: ScoreEntry) -> list[BlankResult]:
    return [result for result in blank_results(entry) if not result.is_correct]
