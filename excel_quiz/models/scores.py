"""Score-related Pydantic models."""
from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class BlankSegment(BaseModel):
    """Blank reference inside question text."""

    blankId: str = Field(..., min_length=1)


QuestionSegmentModel = Union[str, BlankSegment]


class ScoreCreate(BaseModel):
    """Score submitted by the client after grading."""

    chapter_id: int
    chapter_title: str = Field(..., min_length=1, max_length=200)
    score: int = Field(..., ge=0, le=100)
    date: datetime
    user_answers: dict[str, str]
    correct_answers: dict[str, str]
    question_segments: list[QuestionSegmentModel] = Field(default_factory=list)
    choices: list[str] = Field(default_factory=list)


class ScoreResponse(BaseModel):
    """Stored score row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    full_name: str
    chapter_id: int
    chapter_title: str
    score: int
    date: datetime
    user_answers: dict[str, str]
    correct_answers: dict[str, str]
    question_segments: list[QuestionSegmentModel]
    choices: list[str]


class DeletedResponse(BaseModel):
    """Number of rows removed."""

    deleted: int
