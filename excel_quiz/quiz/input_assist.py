"""
Input-assist rules for the answer sheet.

These only change what is pre-filled before submission; grading never looks
at them.
"""

from __future__ import annotations

from typing import Callable, Mapping

from excel_quiz.quiz.catalog import Chapter

AssistRule = Callable[[Chapter, dict[str, str], str, str], dict[str, str]]


def fill_matching_correct_answers(
    chapter: Chapter,
    answers: dict[str, str],
    blank_id: str,
    value: str,
) -> dict[str, str]:
    """A correct pick also fills every other blank sharing that correct answer."""
    if chapter.correct_answers.get(blank_id) != value:
        return answers
    for other_id in chapter.blanks_in_order:
        if other_id != blank_id and chapter.correct_answers[other_id] == value:
            answers[other_id] = value
    return answers


# chapter id -> rule
INPUT_ASSIST_RULES: dict[int, AssistRule] = {
    6: fill_matching_correct_answers,
}


def apply_answer(
    chapter: Chapter,
    answers: Mapping[str, str],
    blank_id: str,
    value: str,
    rules: Mapping[int, AssistRule] = INPUT_ASSIST_RULES,
) -> dict[str, str]:
    """Return a new answer sheet with ``blank_id`` set and assist rules applied."""
    if blank_id not in chapter.correct_answers:
        raise KeyError(f"Unknown blank {blank_id!r} for chapter {chapter.id}")
    updated = dict(answers)
    updated[blank_id] = value
    rule = rules.get(chapter.id)
    if rule is not None:
        updated = rule(chapter, updated, blank_id, value)
    return updated
