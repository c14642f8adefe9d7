"""Quiz client: navigation, history, advice and admin console over remote collaborators."""
from excel_quiz.client.admin_console import AdminAccess, AdminConsole
from excel_quiz.client.advice import AdviceAdapter
from excel_quiz.client.api_client import (
    ApiAdminDirectory,
    ApiClient,
    ApiIdentityProvider,
    ApiRecordStore,
    ApiTextGenerator,
)
from excel_quiz.client.collaborators import AdminUser, Session, SessionEvent
from excel_quiz.client.history_store import HistoryStore
from excel_quiz.client.local_state import LocalStateStore
from excel_quiz.client.navigation import AuthState, Page, QuizNavigator

__all__ = [
    "AdminAccess",
    "AdminConsole",
    "AdviceAdapter",
    "ApiAdminDirectory",
    "ApiClient",
    "ApiIdentityProvider",
    "ApiRecordStore",
    "ApiTextGenerator",
    "AdminUser",
    "Session",
    "SessionEvent",
    "HistoryStore",
    "LocalStateStore",
    "AuthState",
    "Page",
    "QuizNavigator",
]
