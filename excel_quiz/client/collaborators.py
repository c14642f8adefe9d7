"""
Narrow interfaces to the remote collaborators used by the quiz client.

The HTTP implementations live in ``excel_quiz.client.api_client``; tests use
in-memory fakes that satisfy the same protocols.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from excel_quiz.quiz.scores import ScoreEntry


class SessionEvent(enum.Enum):
    # Initial resolution (session may be absent)
    SESSION_RESOLVED = "session_resolved"
    SIGNED_IN = "signed_in"
    # Explicit sign-out, distinct from "no session yet"
    SIGNED_OUT = "signed_out"


@dataclass(frozen=True)
class Session:
    user_id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class AdminUser:
    id: int
    email: str
    display_name: Optional[str] = None


SessionHandler = Callable[[SessionEvent, Optional[Session]], None]
ChangeHandler = Callable[[], Awaitable[None]]
Unsubscribe = Callable[[], None]


class IdentityProvider(Protocol):
    async def get_current_session(self) -> Optional[Session]: ...

    def on_session_change(self, handler: SessionHandler) -> Unsubscribe: ...

    async def sign_out(self) -> None: ...


class RecordStore(Protocol):
    async def insert(self, entry: ScoreEntry) -> ScoreEntry: ...

    async def query(self, chapter_id: Optional[int] = None) -> list[ScoreEntry]: ...

    async def delete_by_id(self, score_id: int) -> None: ...

    async def delete_mine(self) -> int: ...

    # Admin only
    async def query_all(self) -> list[ScoreEntry]: ...

    async def delete_any(self, score_id: int) -> None: ...


class AdminDirectory(Protocol):
    async def is_current_user_admin(self) -> bool: ...

    async def list(self) -> list[AdminUser]: ...

    async def insert(self, email: str, display_name: str) -> AdminUser: ...

    async def update(self, admin_id: int, display_name: str) -> AdminUser: ...

    async def delete(self, admin_id: int) -> None: ...

    def on_change(self, handler: ChangeHandler) -> Unsubscribe: ...


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...
