"""Chapter catalog Pydantic models."""
from pydantic import BaseModel

from excel_quiz.models.scores import QuestionSegmentModel


class ChapterSummaryResponse(BaseModel):
    """Chapter list entry (no answer key)."""

    id: int
    title: str
    problemDescription: str
    blankCount: int


class ChapterResponse(BaseModel):
    """Full chapter definition."""

    id: int
    title: str
    problemDescription: str
    questionSegments: list[QuestionSegmentModel]
    blanksInOrder: list[str]
    choices: list[str]
    correctAnswers: dict[str, str]
