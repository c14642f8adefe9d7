"""Advice requests to the text-generation collaborator."""

from __future__ import annotations

import logging
from typing import Any, Hashable, Optional

from excel_quiz.client.collaborators import TextGenerator
from excel_quiz.errors import AuthorizationDenied, TransportFailure
from excel_quiz.quiz.grader import UNANSWERED_LABEL, blank_results
from excel_quiz.quiz.history import group_by_chapter, numbered_history
from excel_quiz.quiz.scores import ScoreEntry
from excel_quiz.utils.json_utils import compact_dump
from excel_quiz.utils.time_utils import format_timestamp

logger = logging.getLogger(__name__)

RESULT_PROMPT = (
    "あなたはExcelの講師です。以下は穴埋め問題の採点結果です。"
    "間違えた箇所について、正しい関数や記号の意味と使い方を初心者にも分かるように"
    "日本語で簡潔に解説してください。マークダウンの強調記号（*）は使わないでください。"
)

HISTORY_PROMPT = (
    "あなたはExcelの講師です。以下は学習者の章ごとの受験履歴です。"
    "得点の推移から得意な分野と苦手な分野を分析し、次に学習すべき内容を"
    "日本語で簡潔にアドバイスしてください。マークダウンの強調記号（*）は使わないでください。"
)

UNAVAILABLE_MESSAGE = "アドバイスを取得できませんでした。"


def strip_emphasis(text: str) -> str:
    return text.replace("*", "").strip()


def result_context(entry: ScoreEntry) -> dict[str, Any]:
    return {
        "chapterTitle": entry.chapter_title,
        "score": entry.score,
        "answers": [
            {
                "blank": result.blank_id,
                "userAnswer": result.user_answer or UNANSWERED_LABEL,
                "correctAnswer": result.correct_answer,
                "isCorrect": result.is_correct,
            }
            for result in blank_results(entry)
        ],
    }


def history_context(entries: list[ScoreEntry]) -> dict[str, Any]:
    numbered = {id(n.entry): n.attempt for n in numbered_history(entries)}
    chapters = []
    for chapter_id, group in sorted(group_by_chapter(entries).items()):
        chapters.append({
            "chapterId": chapter_id,
            "chapterTitle": group[0].chapter_title,
            "attempts": [
                {
                    "attempt": numbered[id(entry)],
                    "score": entry.score,
                    "date": format_timestamp(entry.date),
                }
                for entry in reversed(group)
            ],
        })
    return {"chapters": chapters}


class AdviceAdapter:
    """
    Single-attempt advice requests.

    ``request_advice`` never raises for collaborator failures: it returns None
    and leaves a readable message in ``error``. ``advice_once`` memoises by a
    caller-chosen key so re-rendering a view does not dispatch again.
    """

    def __init__(self, generator: TextGenerator):
        self.generator = generator
        self.loading = False
        self.error: Optional[str] = None
        self._memo: dict[Hashable, Optional[str]] = {}

    async def request_advice(self, prompt_template: str, context: Any) -> Optional[str]:
        prompt = prompt_template + "\n" + compact_dump(context)
        self.loading = True
        self.error = None
        try:
            text = await self.generator.generate(prompt)
        except (TransportFailure, AuthorizationDenied) as e:
            logger.warning(f"Advice request failed: {e}")
            self.error = UNAVAILABLE_MESSAGE
            return None
        finally:
            self.loading = False
        if not isinstance(text, str):
            self.error = UNAVAILABLE_MESSAGE
            return None
        return strip_emphasis(text)

    async def advice_once(self, key: Hashable, prompt_template: str, context: Any) -> Optional[str]:
        if key in self._memo:
            return self._memo[key]
        # Reserve the key before awaiting so a concurrent render does not dispatch twice
        self._memo[key] = None
        text = await self.request_advice(prompt_template, context)
        self._memo[key] = text
        return text

    def forget(self) -> None:
        self._memo.clear()
        self.error = None
