"""API route modules."""
from excel_quiz.routes import admin, advice, auth, chapters, scores, users

__all__ = ["admin", "advice", "auth", "chapters", "scores", "users"]
