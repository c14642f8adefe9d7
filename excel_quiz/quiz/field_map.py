"""
Two-way field mapping between durable store rows (snake_case) and the
in-memory / local-mirror payloads (camelCase).
"""

from __future__ import annotations

from typing import Any

# store column -> in-memory payload key
STORE_TO_CLIENT: dict[str, str] = {
    "id": "id",
    "user_id": "userId",
    "full_name": "userName",
    "chapter_id": "chapterId",
    "chapter_title": "chapterTitle",
    "score": "score",
    "date": "date",
    "user_answers": "userAnswers",
    "correct_answers": "correctAnswers",
    "question_segments": "questionSegments",
    "choices": "choices",
}

CLIENT_TO_STORE: dict[str, str] = {v: k for k, v in STORE_TO_CLIENT.items()}


def row_to_payload(row: dict[str, Any]) -> dict[str, Any]:
    """Rename known store columns to payload keys, dropping unknown ones."""
    return {STORE_TO_CLIENT[k]: v for k, v in row.items() if k in STORE_TO_CLIENT}


def payload_to_row(payload: dict[str, Any]) -> dict[str, Any]:
    """Rename known payload keys to store columns, dropping unknown ones."""
    return {CLIENT_TO_STORE[k]: v for k, v in payload.items() if k in CLIENT_TO_STORE}
