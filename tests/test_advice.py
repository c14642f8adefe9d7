from datetime import datetime, timezone

import pytest
from conftest import FakeGenerator

from excel_quiz.client.advice import (
    RESULT_PROMPT,
    UNAVAILABLE_MESSAGE,
    AdviceAdapter,
    history_context,
    result_context,
)
from excel_quiz.errors import TransportFailure
from excel_quiz.quiz.catalog import Chapter
from excel_quiz.quiz.grader import grade


@pytest.mark.anyio
async def test_prompt_is_template_plus_context_and_emphasis_stripped() -> None:
    generator = FakeGenerator(text="**SUM** を使いましょう *")
    adapter = AdviceAdapter(generator)
    text = await adapter.request_advice("教えて", {"score": 50})

    assert text == "SUM を使いましょう"
    assert generator.prompts == ['教えて\n{"score": 50}']
    assert adapter.error is None
    assert adapter.loading is False


@pytest.mark.anyio
async def test_failure_returns_none_with_message() -> None:
    adapter = AdviceAdapter(FakeGenerator(error=TransportFailure("quota exceeded")))
    assert await adapter.request_advice("p", {}) is None
    assert adapter.error == UNAVAILABLE_MESSAGE
    assert adapter.loading is False


@pytest.mark.anyio
async def test_advice_once_does_not_redispatch() -> None:
    generator = FakeGenerator()
    adapter = AdviceAdapter(generator)
    first = await adapter.advice_once("view-1", "p", {})
    second = await adapter.advice_once("view-1", "p", {})
    assert first == second == "アドバイス"
    assert len(generator.prompts) == 1

    adapter.forget()
    await adapter.advice_once("view-1", "p", {})
    assert len(generator.prompts) == 2


def test_contexts(two_blank_chapter: Chapter) -> None:
    entry = grade(
        two_blank_chapter,
        {"ア": "A", "イ": ""},
        now=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    context = result_context(entry)
    assert context["score"] == 50
    assert context["answers"][1] == {
        "blank": "イ",
        "userAnswer": "(未回答)",
        "correctAnswer": "B",
        "isCorrect": False,
    }

    later = grade(two_blank_chapter, {"ア": "A", "イ": "B"}, now=datetime(2024, 1, 2, tzinfo=timezone.utc))
    history = history_context([later, entry])
    attempts = history["chapters"][0]["attempts"]
    assert [(a["attempt"], a["score"]) for a in attempts] == [(1, 50), (2, 100)]
    assert attempts[0]["date"] == "2024-01-01T00:00:00Z"
    assert RESULT_PROMPT
