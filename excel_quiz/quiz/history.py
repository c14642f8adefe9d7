"""
Pure helpers over score history: ordering, grouping, filtering and attempt
numbering.

The attempt number of an entry is its 1-based position among all entries of
the same identity and chapter ordered by date ascending. Display order
(newest first) is computed separately and never used for numbering.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from excel_quiz.quiz.scores import ScoreEntry

UNNAMED_USER = "(名前なし)"


@dataclass(frozen=True)
class NumberedEntry:
    entry: ScoreEntry
    attempt: int


@dataclass(frozen=True)
class AdminScoreRow:
    id: int | None
    user_id: str | None
    user_name: str
    chapter_id: int
    chapter_title: str
    score: int
    date: datetime
    attempt: int


@dataclass(frozen=True)
class ChapterSummary:
    chapter_id: int
    attempts: int
    best_score: int
    latest_score: int
    latest_date: datetime


def sort_newest_first(entries: Iterable[ScoreEntry]) -> list[ScoreEntry]:
    return sorted(entries, key=lambda e: e.date, reverse=True)


def filter_by_chapter(entries: Iterable[ScoreEntry], chapter_id: int | None) -> list[ScoreEntry]:
    """None means unfiltered."""
    if chapter_id is None:
        return list(entries)
    return [e for e in entries if e.chapter_id == chapter_id]


def group_by_chapter(entries: Iterable[ScoreEntry]) -> dict[int, list[ScoreEntry]]:
    """Group entries by chapter id; each group newest first."""
    groups: dict[int, list[ScoreEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.chapter_id].append(entry)
    return {chapter_id: sort_newest_first(group) for chapter_id, group in groups.items()}


def _identity(entry: ScoreEntry) -> str:
    return entry.user_id or entry.user_name or ""


def assign_attempts(entries: Iterable[ScoreEntry]) -> list[NumberedEntry]:
    """
    Number entries per (identity, chapter) in ascending date order.

    Returns the entries sorted ascending by date with their attempt number.
    Ties keep input order (stable sort).
    """
    ordered = sorted(entries, key=lambda e: e.date)
    counters: dict[tuple[str, int], int] = defaultdict(int)
    numbered = []
    for entry in ordered:
        key = (_identity(entry), entry.chapter_id)
        counters[key] += 1
        numbered.append(NumberedEntry(entry=entry, attempt=counters[key]))
    return numbered


def numbered_history(
    entries: Iterable[ScoreEntry],
    chapter_id: int | None = None,
) -> list[NumberedEntry]:
    """Rows for the per-user history view: newest first, optionally filtered.

    Attempt numbers are computed over the unfiltered set.
    """
    numbered = assign_attempts(entries)
    if chapter_id is not None:
        numbered = [n for n in numbered if n.entry.chapter_id == chapter_id]
    numbered.reverse()
    return numbered


def display_name(entry: ScoreEntry) -> str:
    return entry.user_name or entry.user_id or UNNAMED_USER


def admin_rows(entries: Iterable[ScoreEntry]) -> list[AdminScoreRow]:
    """Rows for the admin dashboard: by name, chapter, then date ascending."""
    numbered = assign_attempts(entries)
    numbered.sort(key=lambda n: (display_name(n.entry), n.entry.chapter_id, n.entry.date))
    return [
        AdminScoreRow(
            id=n.entry.id,
            user_id=n.entry.user_id,
            user_name=display_name(n.entry),
            chapter_id=n.entry.chapter_id,
            chapter_title=n.entry.chapter_title,
            score=n.entry.score,
            date=n.entry.date,
            attempt=n.attempt,
        )
        for n in numbered
    ]


def chapter_summary(entries: Iterable[ScoreEntry]) -> dict[int, ChapterSummary]:
    summaries = {}
    for chapter_id, group in group_by_chapter(entries).items():
        latest = group[0]
        summaries[chapter_id] = ChapterSummary(
            chapter_id=chapter_id,
            attempts=len(group),
            best_score=max(e.score for e in group),
            latest_score=latest.score,
            latest_date=latest.date,
        )
    return summaries
