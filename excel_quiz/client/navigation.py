"""
Session-driven page navigation for the quiz client.

``QuizNavigator`` holds the authentication state, the current page, the
selected chapter and the in-progress answers. Page, chapter and answers are
written to the local state file on every change; the computed result and the
login overlay are not.

Every asynchronous completion checks the view generation it was issued under.
Navigating bumps the generation, so a response that arrives after the user
has moved on is dropped instead of being applied.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

from excel_quiz.client.advice import (
    HISTORY_PROMPT,
    RESULT_PROMPT,
    AdviceAdapter,
    history_context,
    result_context,
)
from excel_quiz.client.collaborators import IdentityProvider, Session, SessionEvent, Unsubscribe
from excel_quiz.client.history_store import HistoryStore
from excel_quiz.client.local_state import (
    ANSWERS_KEY,
    PAGE_KEY,
    SELECTED_CHAPTER_KEY,
    LocalStateStore,
)
from excel_quiz.errors import AnswerValidationError, TransportFailure
from excel_quiz.quiz.catalog import Catalog, Chapter
from excel_quiz.quiz.grader import empty_answers, grade, is_complete
from excel_quiz.quiz.history import NumberedEntry, filter_by_chapter, numbered_history
from excel_quiz.quiz.input_assist import INPUT_ASSIST_RULES, apply_answer
from excel_quiz.quiz.scores import ScoreEntry
from excel_quiz.utils.time_utils import format_timestamp

logger = logging.getLogger(__name__)

HISTORY_FETCH_FAILED = "履歴を取得できませんでした。"
HISTORY_CLEAR_FAILED = "履歴を削除できませんでした。"


class AuthState(enum.Enum):
    AUTH_PENDING = "auth_pending"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class Page(enum.Enum):
    CHAPTER_SELECTION = "chapterSelection"
    PROBLEM = "problem"
    RESULT = "result"
    HISTORY = "history"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> "Page":
        try:
            return cls(value)
        except ValueError:
            return cls.CHAPTER_SELECTION


class QuizNavigator:
    def __init__(
        self,
        catalog: Catalog,
        identity: IdentityProvider,
        history: HistoryStore,
        state: LocalStateStore,
        advice: Optional[AdviceAdapter] = None,
        assist_rules=INPUT_ASSIST_RULES,
    ):
        self.catalog = catalog
        self.identity = identity
        self.history = history
        self.state = state
        self.advice = advice
        self.assist_rules = assist_rules

        self.auth_state = AuthState.AUTH_PENDING
        self.session: Optional[Session] = None
        self.login_requested = False
        self.score: Optional[ScoreEntry] = None
        self.history_filter: Optional[int] = None
        self.history_error: Optional[str] = None
        self._generation = 0
        self._unsubscribe: Optional[Unsubscribe] = None

        self.page = Page.parse(state.get(PAGE_KEY))
        chapter_id = state.get(SELECTED_CHAPTER_KEY)
        self.selected_chapter_id: Optional[int] = (
            chapter_id
            if isinstance(chapter_id, int) and not isinstance(chapter_id, bool) and chapter_id in catalog
            else None
        )
        answers = state.get(ANSWERS_KEY)
        self.answers: dict[str, str] = dict(answers) if isinstance(answers, dict) else {}
        self._repair_restored_page()

    # -- state helpers -------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.auth_state is AuthState.AUTH_PENDING

    @property
    def is_authenticated(self) -> bool:
        return self.auth_state is AuthState.AUTHENTICATED

    @property
    def selected_chapter(self) -> Optional[Chapter]:
        return self.catalog.get(self.selected_chapter_id)

    @property
    def generation(self) -> int:
        return self._generation

    def _next_generation(self) -> int:
        self._generation += 1
        if self.advice is not None:
            self.advice.forget()
        return self._generation

    def _persist(self) -> None:
        self.state.update({
            PAGE_KEY: self.page.value,
            SELECTED_CHAPTER_KEY: self.selected_chapter_id,
            ANSWERS_KEY: self.answers,
        })

    def _repair_restored_page(self) -> None:
        # The result itself is not persisted; fall back to the problem it came from
        if self.page is Page.RESULT and self.score is None:
            self.page = Page.PROBLEM
        if self.page is Page.PROBLEM and self.selected_chapter is None:
            self.page = Page.CHAPTER_SELECTION
            self.answers = {}

    def _reset_navigation(self) -> None:
        self._next_generation()
        self.page = Page.CHAPTER_SELECTION
        self.selected_chapter_id = None
        self.answers = {}
        self.score = None
        self.login_requested = False
        self.history_filter = None
        self.history_error = None
        self.state.remove(PAGE_KEY, SELECTED_CHAPTER_KEY, ANSWERS_KEY)

    def _require_login(self) -> bool:
        """Request the login overlay unless signed in. Returns True when signed in."""
        if self.is_loading:
            return False
        if not self.is_authenticated:
            self.login_requested = True
            return False
        return True

    # -- identity ------------------------------------------------------

    async def start(self) -> None:
        """Subscribe to identity changes and resolve the initial session."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_session_change(self.on_session_event)
        try:
            session = await self.identity.get_current_session()
        except TransportFailure as e:
            logger.error(f"Failed to resolve session: {e}")
            session = None
        self._resolve(session)
        if self.is_authenticated and self.page is Page.HISTORY:
            await self.show_history(self.history_filter)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _resolve(self, session: Optional[Session]) -> None:
        if session is not None:
            self.session = session
            self.auth_state = AuthState.AUTHENTICATED
            return
        self._signed_out()

    def _signed_out(self) -> None:
        # Same full reset whether the user signed out or no session was found
        self.session = None
        self.auth_state = AuthState.UNAUTHENTICATED
        self._reset_navigation()
        self.history.clear_local()

    def on_session_event(self, event: SessionEvent, session: Optional[Session]) -> None:
        if event is SessionEvent.SIGNED_OUT:
            self._signed_out()
        elif event is SessionEvent.SIGNED_IN:
            self._resolve(session)
            self.login_requested = False
        else:
            self._resolve(session)

    def request_login(self) -> None:
        self.login_requested = True

    def dismiss_login(self) -> None:
        self.login_requested = False

    async def sign_out(self) -> None:
        try:
            await self.identity.sign_out()
        except TransportFailure as e:
            logger.warning(f"Sign-out failed: {e}")
        # The provider normally reports SIGNED_OUT; reset even if it did not
        if self.is_authenticated or self.page is not Page.CHAPTER_SELECTION:
            self._signed_out()

    # -- quiz ----------------------------------------------------------

    def select_chapter(self, chapter_id: int) -> bool:
        """Open a chapter. Returns False when login was requested instead.

        Raises:
            LookupError: if the chapter does not exist.
        """
        if not self._require_login():
            return False
        if self.catalog.get(chapter_id) is None:
            raise LookupError(f"Unknown chapter {chapter_id}")
        self._next_generation()
        self.selected_chapter_id = chapter_id
        self.answers = empty_answers(self.catalog.get(chapter_id))
        self.score = None
        self.page = Page.PROBLEM
        self._persist()
        return True

    def set_answer(self, blank_id: str, value: str) -> dict[str, str]:
        if self.is_loading:
            return dict(self.answers)
        chapter = self.selected_chapter
        if chapter is None or self.page is not Page.PROBLEM:
            raise RuntimeError("No chapter is being answered")
        self.answers = apply_answer(chapter, self.answers, blank_id, value, self.assist_rules)
        self._persist()
        return dict(self.answers)

    def can_submit(self) -> bool:
        chapter = self.selected_chapter
        return (
            self.is_authenticated
            and self.page is Page.PROBLEM
            and chapter is not None
            and is_complete(chapter, self.answers)
        )

    async def submit(self) -> Optional[ScoreEntry]:
        """Grade, record and show the result.

        Returns None when login was requested instead.

        Raises:
            AnswerValidationError: if a blank is still empty.
        """
        if not self._require_login():
            return None
        chapter = self.selected_chapter
        if chapter is None or self.page is not Page.PROBLEM:
            return None
        if not is_complete(chapter, self.answers):
            raise AnswerValidationError("Every blank must be answered before submitting")

        entry = grade(chapter, self.answers)
        if self.session is not None:
            entry = entry.copy_with(user_id=self.session.user_id, user_name=self.session.display_name)
        generation = self._next_generation()
        self.score = entry
        self.page = Page.RESULT
        self._persist()

        stored = await self.history.append(entry)
        if generation == self._generation:
            self.score = stored
        return stored

    def retry(self) -> None:
        """Answer the same chapter again from a blank sheet."""
        if self.is_loading:
            return
        chapter = self.selected_chapter
        if chapter is None:
            self.back_to_chapters()
            return
        self._next_generation()
        self.answers = empty_answers(chapter)
        self.score = None
        self.page = Page.PROBLEM
        self._persist()

    def back_to_chapters(self) -> None:
        """Leave the problem/result view. History is kept."""
        if self.is_loading:
            return
        self._next_generation()
        self.selected_chapter_id = None
        self.answers = {}
        self.score = None
        self.page = Page.CHAPTER_SELECTION
        self._persist()

    # -- history -------------------------------------------------------

    async def show_history(self, chapter_id: Optional[int] = None) -> bool:
        """Re-fetch history, replace the local list, then show the history page.

        Returns False if login was requested or the response arrived after the
        user navigated elsewhere.
        """
        if not self._require_login():
            return False
        generation = self._next_generation()
        try:
            entries = await self.history.fetch()
        except TransportFailure as e:
            if generation != self._generation:
                return False
            logger.error(f"Failed to fetch history: {e}")
            self.history_error = HISTORY_FETCH_FAILED
        else:
            if generation != self._generation:
                logger.debug("Discarding stale history response")
                return False
            self.history.replace_all(entries)
            self.history_error = None
        self.history_filter = chapter_id
        self.page = Page.HISTORY
        self._persist()
        return True

    def set_history_filter(self, chapter_id: Optional[int]) -> None:
        self.history_filter = chapter_id

    @property
    def history_rows(self) -> list[NumberedEntry]:
        return numbered_history(self.history.entries, self.history_filter)

    async def clear_history(self, confirmed: bool = False) -> bool:
        """Delete the user's stored scores and the local mirror.

        Raises:
            ConfirmationRequired: unless ``confirmed`` is true.
        """
        if not self._require_login():
            return False
        try:
            await self.history.clear_all(confirmed=confirmed)
        except TransportFailure as e:
            logger.error(f"Failed to clear history: {e}")
            self.history_error = HISTORY_CLEAR_FAILED
            return False
        self.history_error = None
        return True

    # -- admin ---------------------------------------------------------

    def open_admin(self) -> bool:
        """Move to the admin page. The console re-checks authorization itself."""
        if not self._require_login():
            return False
        self._next_generation()
        self.page = Page.ADMIN
        self._persist()
        return True

    # -- advice --------------------------------------------------------

    async def advice_for_result(self) -> Optional[str]:
        if self.advice is None or self.score is None:
            return None
        entry = self.score
        generation = self._generation
        key = ("result", generation, entry.chapter_id, format_timestamp(entry.date))
        text = await self.advice.advice_once(key, RESULT_PROMPT, result_context(entry))
        return text if generation == self._generation else None

    async def advice_for_history(self) -> Optional[str]:
        if self.advice is None or self.page is not Page.HISTORY:
            return None
        entries = filter_by_chapter(self.history.entries, self.history_filter)
        if not entries:
            return None
        generation = self._generation
        key = ("history", generation, self.history_filter, len(entries))
        text = await self.advice.advice_once(key, HISTORY_PROMPT, history_context(entries))
        return text if generation == self._generation else None
