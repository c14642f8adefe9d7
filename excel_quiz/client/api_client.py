"""
httpx implementations of the collaborator protocols against the backend API.

One ``ApiClient`` owns the ``httpx.AsyncClient`` and the bearer token; the
identity, record, admin and advice adapters are constructed around it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

import httpx

from excel_quiz import config
from excel_quiz.client.collaborators import (
    AdminUser,
    ChangeHandler,
    Session,
    SessionEvent,
    SessionHandler,
    Unsubscribe,
)
from excel_quiz.client.local_state import AUTH_TOKEN_KEY, LocalStateStore
from excel_quiz.errors import AuthorizationDenied, TransportFailure
from excel_quiz.quiz.scores import ScoreEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict) and data.get("detail"):
        return str(data["detail"])
    return response.text[:200]


def _decode(what: str, decoder: Callable[[Any], T], data: Any) -> T:
    """Convert a response body, reporting a malformed body as a transport failure."""
    try:
        return decoder(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise TransportFailure(f"Malformed {what} in response: {e!r}") from e


def _decode_list(what: str, decoder: Callable[[Any], T], data: Any) -> list[T]:
    if not isinstance(data, list):
        raise TransportFailure(f"Expected a list of {what}, got {type(data).__name__}")
    return [_decode(what, decoder, item) for item in data]


def _session_from_json(data: dict[str, Any]) -> Session:
    return Session(
        user_id=str(data["id"]),
        display_name=data.get("display_name") or data.get("username"),
        avatar_url=data.get("avatar_url"),
        email=data.get("email"),
    )


def _advice_text(data: dict[str, Any]) -> str:
    text = data["text"]
    if not isinstance(text, str):
        raise TypeError(f"advice text is {type(text).__name__}")
    return text


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            AuthorizationDenied: on HTTP 403.
            TransportFailure: on network errors and any other error status.
        """
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            r = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {path} failed: {e}") from e
        if r.status_code == 403:
            raise AuthorizationDenied(_error_detail(r))
        if r.is_error:
            raise TransportFailure(
                f"{method} {path} returned HTTP {r.status_code}: {_error_detail(r)}",
                status_code=r.status_code,
            )
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise TransportFailure(f"{method} {path} returned invalid JSON") from e

    async def aclose(self) -> None:
        await self._client.aclose()


class ApiIdentityProvider:
    """Identity provider backed by ``/api/auth``.

    The bearer token is kept in the local state file when one is given, so a
    restarted client resolves the previous session.
    """

    def __init__(self, api: ApiClient, state: Optional[LocalStateStore] = None):
        self.api = api
        self.state = state
        self._handlers: list[SessionHandler] = []
        if state is not None and api.token is None:
            api.token = state.get(AUTH_TOKEN_KEY)

    def on_session_change(self, handler: SessionHandler) -> Unsubscribe:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def _emit(self, event: SessionEvent, session: Optional[Session]) -> None:
        for handler in list(self._handlers):
            handler(event, session)

    def _set_token(self, token: Optional[str]) -> None:
        self.api.token = token
        if self.state is not None:
            if token:
                self.state.set(AUTH_TOKEN_KEY, token)
            else:
                self.state.remove(AUTH_TOKEN_KEY)

    async def _fetch_session(self) -> Optional[Session]:
        if not self.api.token:
            return None
        try:
            data = await self.api.request("GET", "/api/auth/me")
        except TransportFailure as e:
            logger.info(f"Stored session not usable: {e}")
            if e.status_code == 401:
                self._set_token(None)
            return None
        return _decode("session", _session_from_json, data)

    async def get_current_session(self) -> Optional[Session]:
        session = await self._fetch_session()
        self._emit(SessionEvent.SESSION_RESOLVED, session)
        return session

    async def register(
        self, username: str, email: str, password: str, display_name: Optional[str] = None
    ) -> None:
        await self.api.request(
            "POST",
            "/api/auth/register",
            json={
                "username": username,
                "email": email,
                "password": password,
                "display_name": display_name,
            },
        )

    async def sign_in(self, username: str, password: str) -> Session:
        data = await self.api.request(
            "POST", "/api/auth/login", json={"username": username, "password": password}
        )
        self._set_token(_decode("token", lambda d: str(d["access_token"]), data))
        session = await self._fetch_session()
        if session is None:
            raise TransportFailure("Signed in but the session could not be loaded")
        self._emit(SessionEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        if self.api.token:
            try:
                await self.api.request("POST", "/api/auth/logout")
            except TransportFailure as e:
                logger.warning(f"Logout request failed: {e}")
        self._set_token(None)
        self._emit(SessionEvent.SIGNED_OUT, None)


class ApiRecordStore:
    """Durable score store backed by ``/api/scores`` and ``/api/admin/scores``."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def insert(self, entry: ScoreEntry) -> ScoreEntry:
        row = await self.api.request("POST", "/api/scores", json=entry.to_row())
        return _decode("score", ScoreEntry.from_row, row)

    async def query(self, chapter_id: Optional[int] = None) -> list[ScoreEntry]:
        params = {"chapter_id": chapter_id} if chapter_id is not None else None
        rows = await self.api.request("GET", "/api/scores/me", params=params)
        return _decode_list("scores", ScoreEntry.from_row, rows)

    async def delete_by_id(self, score_id: int) -> None:
        await self.api.request("DELETE", f"/api/scores/{score_id}")

    async def delete_mine(self) -> int:
        data = await self.api.request("DELETE", "/api/scores/me")
        return _decode("delete count", lambda d: int(d["deleted"]), data)

    async def query_all(self) -> list[ScoreEntry]:
        rows = await self.api.request("GET", "/api/admin/scores")
        return _decode_list("scores", ScoreEntry.from_row, rows)

    async def delete_any(self, score_id: int) -> None:
        await self.api.request("DELETE", f"/api/admin/scores/{score_id}")


def _admin_from_json(data: dict[str, Any]) -> AdminUser:
    return AdminUser(id=int(data["id"]), email=data["email"], display_name=data.get("display_name"))


class ApiAdminDirectory:
    """Admin directory backed by ``/api/admin``.

    Change notifications fire after each successful mutation made through
    this directory.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self._handlers: list[ChangeHandler] = []

    def on_change(self, handler: ChangeHandler) -> Unsubscribe:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    async def _notify(self) -> None:
        for handler in list(self._handlers):
            await handler()

    async def is_current_user_admin(self) -> bool:
        data = await self.api.request("GET", "/api/admin/me")
        return _decode("admin check", lambda d: bool(d["is_admin"]), data)

    async def list(self) -> list[AdminUser]:
        rows = await self.api.request("GET", "/api/admin/admins")
        return _decode_list("admins", _admin_from_json, rows)

    async def insert(self, email: str, display_name: str) -> AdminUser:
        data = await self.api.request(
            "POST", "/api/admin/admins", json={"email": email, "display_name": display_name}
        )
        await self._notify()
        return _decode("admin", _admin_from_json, data)

    async def update(self, admin_id: int, display_name: str) -> AdminUser:
        data = await self.api.request(
            "PATCH", f"/api/admin/admins/{admin_id}", json={"display_name": display_name}
        )
        await self._notify()
        return _decode("admin", _admin_from_json, data)

    async def delete(self, admin_id: int) -> None:
        await self.api.request("DELETE", f"/api/admin/admins/{admin_id}")
        await self._notify()


class ApiTextGenerator:
    """Text generation through the backend's ``/api/advice`` proxy."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def generate(self, prompt: str) -> str:
        data = await self.api.request("POST", "/api/advice", json={"prompt": prompt})
        return _decode("advice", _advice_text, data)
