from datetime import datetime, timezone

import pytest

from excel_quiz.quiz.catalog import BlankRef
from excel_quiz.quiz.field_map import CLIENT_TO_STORE, STORE_TO_CLIENT, payload_to_row, row_to_payload
from excel_quiz.quiz.scores import ScoreEntry


def test_field_map_covers_required_pairs() -> None:
    expected = {
        "user_id": "userId",
        "chapter_id": "chapterId",
        "chapter_title": "chapterTitle",
        "user_answers": "userAnswers",
        "correct_answers": "correctAnswers",
        "question_segments": "questionSegments",
    }
    for column, key in expected.items():
        assert STORE_TO_CLIENT[column] == key
        assert CLIENT_TO_STORE[key] == column


def test_unknown_fields_are_dropped() -> None:
    assert row_to_payload({"chapter_id": 1, "created_by": "x"}) == {"chapterId": 1}
    assert payload_to_row({"chapterId": 1, "extra": True}) == {"chapter_id": 1}


def test_entry_from_store_row() -> None:
    row = {
        "id": 12,
        "user_id": "7",
        "full_name": "山田",
        "chapter_id": 3,
        "chapter_title": "第3章",
        "score": 75,
        "date": "2024-06-01T08:00:00Z",
        "user_answers": {"ア": "SUM"},
        "correct_answers": {"ア": "SUM"},
        "question_segments": ["=", {"blankId": "ア"}],
        "choices": ["SUM"],
    }
    entry = ScoreEntry.from_row(row)
    assert entry.id == 12
    assert entry.user_id == "7"
    assert entry.user_name == "山田"
    assert entry.date == datetime(2024, 6, 1, 8, tzinfo=timezone.utc)
    assert entry.question_segments == ("=", BlankRef("ア"))

    back = entry.to_row()
    assert back["date"] == "2024-06-01T08:00:00Z"
    assert back["question_segments"] == ["=", {"blankId": "ア"}]
    assert back["full_name"] == "山田"


def test_invalid_payloads() -> None:
    with pytest.raises(ValueError):
        ScoreEntry.from_payload({"chapterId": 1, "score": 10, "date": "yesterday"})
    with pytest.raises(ValueError):
        ScoreEntry.from_payload({"score": 10, "date": "2024-01-01T00:00:00Z"})
