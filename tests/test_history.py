import random
from datetime import datetime, timedelta, timezone

from excel_quiz.quiz.history import (
    UNNAMED_USER,
    admin_rows,
    assign_attempts,
    chapter_summary,
    filter_by_chapter,
    group_by_chapter,
    numbered_history,
    sort_newest_first,
)
from excel_quiz.quiz.scores import ScoreEntry

T0 = datetime(2024, 4, 1, 10, 0, tzinfo=timezone.utc)


def make_entry(chapter_id: int, minutes: int, score: int = 50, **kwargs) -> ScoreEntry:
    return ScoreEntry(
        chapter_id=chapter_id,
        chapter_title=f"第{chapter_id}章",
        score=score,
        date=T0 + timedelta(minutes=minutes),
        user_answers={"ア": "A"},
        correct_answers={"ア": "A"},
        **kwargs,
    )


def test_sort_and_filter() -> None:
    entries = [make_entry(1, 5), make_entry(2, 1), make_entry(1, 9)]
    assert [e.date for e in sort_newest_first(entries)] == sorted((e.date for e in entries), reverse=True)
    assert filter_by_chapter(entries, None) == entries
    assert [e.chapter_id for e in filter_by_chapter(entries, 1)] == [1, 1]


def test_group_by_chapter_keeps_every_entry() -> None:
    entries = [make_entry(c, m) for c, m in [(1, 3), (2, 1), (1, 1), (3, 7), (2, 9), (1, 2)]]
    random.Random(7).shuffle(entries)
    groups = group_by_chapter(entries)
    flattened = [entry for group in groups.values() for entry in group]
    assert sorted(flattened, key=id) == sorted(entries, key=id)
    assert len(flattened) == len(entries)
    for group in groups.values():
        assert group == sort_newest_first(group)


def test_attempt_numbers_follow_time_not_list_order() -> None:
    t1, t2, t3 = make_entry(1, 1), make_entry(1, 2), make_entry(1, 3)
    numbered = assign_attempts([t3, t1, t2])
    assert [(n.entry, n.attempt) for n in numbered] == [(t1, 1), (t2, 2), (t3, 3)]


def test_numbered_history_is_newest_first_with_oldest_as_attempt_one() -> None:
    entries = [make_entry(1, 1), make_entry(2, 2), make_entry(1, 3)]
    rows = numbered_history(entries)
    assert [row.entry.date for row in rows] == [e.date for e in sort_newest_first(entries)]
    assert [(row.entry.chapter_id, row.attempt) for row in rows] == [(1, 2), (2, 1), (1, 1)]

    filtered = numbered_history(entries, chapter_id=1)
    assert [row.attempt for row in filtered] == [2, 1]


def test_admin_rows_order_and_attempts_match_user_view() -> None:
    alice = dict(user_id="u1", user_name="Alice")
    bob = dict(user_id="u2", user_name="Bob")
    entries = [
        make_entry(2, 5, **bob),
        make_entry(1, 4, **alice),
        make_entry(1, 1, **alice),
        make_entry(1, 2, **bob),
        make_entry(2, 3, **alice),
    ]
    rows = admin_rows(entries)
    assert [(r.user_name, r.chapter_id, r.attempt) for r in rows] == [
        ("Alice", 1, 1),
        ("Alice", 1, 2),
        ("Alice", 2, 1),
        ("Bob", 1, 1),
        ("Bob", 2, 1),
    ]

    alice_view = numbered_history([e for e in entries if e.user_id == "u1"])
    admin_view = {(r.chapter_id, r.date): r.attempt for r in rows if r.user_id == "u1"}
    assert {(n.entry.chapter_id, n.entry.date): n.attempt for n in alice_view} == admin_view


def test_admin_rows_name_fallbacks() -> None:
    rows = admin_rows([make_entry(1, 1, user_id="abc"), make_entry(1, 2)])
    assert {r.user_name for r in rows} == {"abc", UNNAMED_USER}


def test_chapter_summary() -> None:
    entries = [make_entry(1, 1, score=40), make_entry(1, 5, score=80), make_entry(1, 9, score=60)]
    summary = chapter_summary(entries)[1]
    assert summary.attempts == 3
    assert summary.best_score == 80
    assert summary.latest_score == 60
    assert summary.latest_date == T0 + timedelta(minutes=9)
