"""Admin console: admin directory management and the all-users score table."""

from __future__ import annotations

import enum
import logging
from typing import Optional

from excel_quiz.client.collaborators import AdminDirectory, AdminUser, RecordStore, Unsubscribe
from excel_quiz.errors import (
    AuthorizationDenied,
    ConfirmationRequired,
    LastAdminError,
    TransportFailure,
)
from excel_quiz.quiz.history import AdminScoreRow, admin_rows
from excel_quiz.quiz.scores import ScoreEntry

logger = logging.getLogger(__name__)


class AdminAccess(enum.Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


class AdminConsole:
    """
    State behind the admin page.

    The console asks the directory whether the current user is an admin every
    time it is opened; navigation permission is not trusted. Responses that
    arrive after ``close()`` are ignored.
    """

    def __init__(self, directory: AdminDirectory, records: RecordStore):
        self.directory = directory
        self.records = records
        self.access = AdminAccess.UNKNOWN
        self.admins: list[AdminUser] = []
        self.entries: list[ScoreEntry] = []
        self.error: Optional[str] = None
        self._generation = 0
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def is_open(self) -> bool:
        return self.access is AdminAccess.GRANTED

    @property
    def score_rows(self) -> list[AdminScoreRow]:
        return admin_rows(self.entries)

    @property
    def has_incomplete_profiles(self) -> bool:
        """True if some admin has no display name."""
        return any(not (admin.display_name or "").strip() for admin in self.admins)

    async def open(self) -> AdminAccess:
        self._generation += 1
        generation = self._generation
        try:
            allowed = await self.directory.is_current_user_admin()
        except (AuthorizationDenied, TransportFailure) as e:
            logger.warning(f"Admin check failed: {e}")
            allowed = False
        if generation != self._generation:
            return self.access
        if not allowed:
            self.access = AdminAccess.DENIED
            return self.access

        self.access = AdminAccess.GRANTED
        if self._unsubscribe is None:
            self._unsubscribe = self.directory.on_change(self.refresh_admins)
        await self.refresh_admins()
        await self.refresh_scores()
        return self.access

    def close(self) -> None:
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.access = AdminAccess.UNKNOWN
        self.admins = []
        self.entries = []
        self.error = None

    def _fail(self, message: str, exc: Exception) -> None:
        logger.error(f"{message}: {exc}")
        self.error = message

    async def refresh_admins(self) -> None:
        generation = self._generation
        try:
            admins = await self.directory.list()
        except (AuthorizationDenied, TransportFailure) as e:
            if generation == self._generation:
                self._fail("管理者一覧を取得できませんでした", e)
            return
        if generation == self._generation and self.is_open:
            self.admins = admins

    async def refresh_scores(self) -> None:
        generation = self._generation
        try:
            entries = await self.records.query_all()
        except (AuthorizationDenied, TransportFailure) as e:
            if generation == self._generation:
                self._fail("成績一覧を取得できませんでした", e)
            return
        if generation == self._generation and self.is_open:
            self.entries = entries

    async def add_admin(self, email: str, display_name: str) -> Optional[AdminUser]:
        """
        Raises:
            ValueError: if the email or display name is blank.
        """
        email = (email or "").strip()
        display_name = (display_name or "").strip()
        if not email or not display_name:
            raise ValueError("Email and display name are required")
        try:
            admin = await self.directory.insert(email, display_name)
        except (AuthorizationDenied, TransportFailure) as e:
            self._fail("管理者を追加できませんでした", e)
            return None
        self.error = None
        return admin

    async def rename_admin(self, admin_id: int, display_name: str) -> Optional[AdminUser]:
        """
        Raises:
            ValueError: if the display name is blank.
        """
        display_name = (display_name or "").strip()
        if not display_name:
            raise ValueError("Display name is required")
        try:
            admin = await self.directory.update(admin_id, display_name)
        except (AuthorizationDenied, TransportFailure) as e:
            self._fail("表示名を更新できませんでした", e)
            return None
        self.error = None
        return admin

    async def delete_admin(self, admin_id: int) -> bool:
        """Remove an admin optimistically; the list is restored on failure.

        Raises:
            LastAdminError: if at most one admin is listed. No request is sent.
        """
        if len(self.admins) <= 1:
            raise LastAdminError("At least one admin must remain")
        generation = self._generation
        previous = list(self.admins)
        self.admins = [admin for admin in self.admins if admin.id != admin_id]
        try:
            await self.directory.delete(admin_id)
        except (AuthorizationDenied, TransportFailure) as e:
            if generation == self._generation:
                self.admins = previous
                self._fail("管理者を削除できませんでした", e)
            return False
        self.error = None
        return True

    async def delete_score(self, score_id: int, confirmed: bool = False) -> bool:
        """
        Raises:
            ConfirmationRequired: unless ``confirmed`` is true.
        """
        if not confirmed:
            raise ConfirmationRequired("Deleting a score needs confirmation")
        generation = self._generation
        try:
            await self.records.delete_any(score_id)
        except (AuthorizationDenied, TransportFailure) as e:
            if generation == self._generation:
                self._fail("成績を削除できませんでした", e)
            return False
        if generation == self._generation:
            self.entries = [entry for entry in self.entries if entry.id != score_id]
            self.error = None
        return True
