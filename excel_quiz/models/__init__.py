"""Pydantic models."""
from excel_quiz.models.admins import (
    AdminCreate,
    AdminResponse,
    AdminStatusResponse,
    AdminUpdate,
)
from excel_quiz.models.advice import AdviceRequest, AdviceResponse
from excel_quiz.models.auth import (
    MessageResponse,
    ProfileUpdateRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from excel_quiz.models.chapters import ChapterResponse, ChapterSummaryResponse
from excel_quiz.models.scores import DeletedResponse, ScoreCreate, ScoreResponse

__all__ = [
    "AdminCreate",
    "AdminResponse",
    "AdminStatusResponse",
    "AdminUpdate",
    "AdviceRequest",
    "AdviceResponse",
    "ChapterResponse",
    "ChapterSummaryResponse",
    "DeletedResponse",
    "MessageResponse",
    "ProfileUpdateRequest",
    "ScoreCreate",
    "ScoreResponse",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
]
