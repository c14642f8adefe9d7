"""Database models."""
from excel_quiz.models.db.user import User, Session
from excel_quiz.models.db.score import Score
from excel_quiz.models.db.admin import AdminUser

__all__ = [
    "User",
    "Session",
    "Score",
    "AdminUser",
]
