from datetime import datetime, timezone

from excel_quiz.quiz.catalog import BlankRef, Catalog, Chapter
from excel_quiz.quiz.grader import (
    UNANSWERED_LABEL,
    blank_results,
    empty_answers,
    grade,
    is_complete,
    mistakes,
    percent,
)


def test_all_correct_scores_100(catalog: Catalog) -> None:
    for chapter in catalog:
        assert grade(chapter, dict(chapter.correct_answers)).score == 100


def test_no_answers_scores_zero(catalog: Catalog) -> None:
    for chapter in catalog:
        assert grade(chapter, {}).score == 0
        assert grade(chapter, empty_answers(chapter)).score == 0


def test_answer_order_does_not_matter(two_blank_chapter: Chapter) -> None:
    forward = {"ア": "A", "イ": "A"}
    backward = {"イ": "A", "ア": "A"}
    assert grade(two_blank_chapter, forward).score == grade(two_blank_chapter, backward).score


def test_two_of_three_rounds_to_67() -> None:
    chapter = Chapter(
        id=7,
        title="t",
        problem_description="",
        question_segments=(BlankRef("ア"), BlankRef("イ"), BlankRef("ウ")),
        blanks_in_order=("ア", "イ", "ウ"),
        choices=("x", "y"),
        correct_answers={"ア": "x", "イ": "x", "ウ": "y"},
    )
    assert grade(chapter, {"ア": "x", "イ": "x", "ウ": "x"}).score == 67


def test_round_half_up() -> None:
    assert percent(1, 8) == 13  # 12.5
    assert percent(1, 3) == 33
    assert percent(5, 8) == 63  # 62.5


def test_comparison_is_exact(two_blank_chapter: Chapter) -> None:
    assert grade(two_blank_chapter, {"ア": "a", "イ": "B "}).score == 0


def test_fifty_percent_entry_snapshots(two_blank_chapter: Chapter) -> None:
    now = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    answers = {"ア": "A", "イ": "A"}
    entry = grade(two_blank_chapter, answers, now=now)

    assert entry.score == 50
    assert entry.user_answers == {"ア": "A", "イ": "A"}
    assert entry.correct_answers == {"ア": "A", "イ": "B"}
    assert entry.chapter_id == 99
    assert entry.chapter_title == "テスト"
    assert entry.date == now
    assert entry.choices == ("A", "B")
    assert entry.question_segments == two_blank_chapter.question_segments

    # Later edits to the caller's mappings do not leak into the entry
    answers["ア"] = "B"
    two_blank_chapter.correct_answers["ア"] = "B"
    assert entry.user_answers["ア"] == "A"
    assert entry.correct_answers["ア"] == "A"


def test_is_complete(two_blank_chapter: Chapter) -> None:
    assert not is_complete(two_blank_chapter, {})
    assert not is_complete(two_blank_chapter, {"ア": "A", "イ": ""})
    assert is_complete(two_blank_chapter, {"ア": "A", "イ": "A"})


def test_blank_results_and_mistakes(two_blank_chapter: Chapter) -> None:
    entry = grade(two_blank_chapter, {"ア": "", "イ": "B"})
    results = blank_results(entry)
    assert [r.blank_id for r in results] == ["ア", "イ"]
    assert results[0].user_answer is None
    assert not results[0].is_correct
    assert results[1].is_correct
    assert [r.blank_id for r in mistakes(entry)] == ["ア"]
    assert UNANSWERED_LABEL == "(未回答)"
