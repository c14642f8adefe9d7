from pathlib import Path

import httpx
import pytest
from conftest import FakeDirectory, FakeIdentity
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from excel_quiz.app import app
from excel_quiz.client.admin_console import AdminAccess, AdminConsole
from excel_quiz.client.advice import UNAVAILABLE_MESSAGE, AdviceAdapter
from excel_quiz.client.api_client import (
    ApiAdminDirectory,
    ApiClient,
    ApiIdentityProvider,
    ApiRecordStore,
    ApiTextGenerator,
)
from excel_quiz.client.collaborators import AdminUser, Session, SessionEvent
from excel_quiz.client.history_store import HistoryStore
from excel_quiz.client.local_state import AUTH_TOKEN_KEY, LocalStateStore
from excel_quiz.client.navigation import AuthState, Page, QuizNavigator
from excel_quiz.client.wiring import QuizClient
from excel_quiz.database import seed_initial_admin
from excel_quiz.errors import AuthorizationDenied, LastAdminError, TransportFailure
from excel_quiz.quiz.catalog import Catalog


def asgi() -> httpx.ASGITransport:
    return httpx.ASGITransport(app=app)


@pytest.mark.anyio
async def test_full_quiz_flow_over_http(api: TestClient, tmp_path: Path) -> None:
    api.post(
        "/api/auth/register",
        json={"username": "kana", "email": "kana@example.com", "password": "secret123", "display_name": "かな"},
    )
    client = QuizClient(base_url="http://testserver", state_path=tmp_path / "state.json", transport=asgi())
    try:
        await client.navigator.start()
        assert client.navigator.auth_state is AuthState.UNAUTHENTICATED

        session = await client.identity.sign_in("kana", "secret123")
        assert session.display_name == "かな"
        assert client.navigator.is_authenticated

        navigator = client.navigator
        navigator.select_chapter(1)
        chapter = navigator.selected_chapter
        navigator.set_answer("ア", chapter.correct_answers["ア"])
        for blank_id in chapter.blanks_in_order[1:]:
            navigator.set_answer(blank_id, chapter.correct_answers["ア"])
        entry = await navigator.submit()
        assert entry.id is not None
        assert entry.score == 25
        assert entry.user_name == "かな"

        assert await navigator.show_history()
        assert [e.id for e in client.history.entries] == [entry.id]
        assert client.history.entries[0].user_answers == entry.user_answers

        assert await navigator.clear_history(confirmed=True)
        assert await client.records.query() == []
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_token_survives_restart(api: TestClient, tmp_path: Path) -> None:
    api.post("/api/auth/register", json={"username": "mei", "email": "mei@example.com", "password": "secret123"})
    state_path = tmp_path / "state.json"

    first = ApiClient("http://testserver", transport=asgi())
    identity = ApiIdentityProvider(first, LocalStateStore(state_path))
    events = []
    unsubscribe = identity.on_session_change(lambda event, session: events.append(event))
    await identity.sign_in("mei", "secret123")
    await first.aclose()
    assert LocalStateStore(state_path).get(AUTH_TOKEN_KEY)

    second = ApiClient("http://testserver", transport=asgi())
    restored = ApiIdentityProvider(second, LocalStateStore(state_path))
    session = await restored.get_current_session()
    assert session is not None and session.email == "mei@example.com"

    await restored.sign_out()
    assert LocalStateStore(state_path).get(AUTH_TOKEN_KEY) is None
    assert await restored.get_current_session() is None
    await second.aclose()

    unsubscribe()
    assert events == [SessionEvent.SIGNED_IN]


@pytest.mark.anyio
async def test_admin_console_over_http(api: TestClient, session_factory: sessionmaker, tmp_path: Path) -> None:
    db = session_factory()
    try:
        seed_initial_admin(db, "chief@example.com", None)
    finally:
        db.close()
    api.post("/api/auth/register", json={"username": "chief", "email": "chief@example.com", "password": "secret123"})

    client = QuizClient(base_url="http://testserver", state_path=tmp_path / "state.json", transport=asgi())
    try:
        await client.identity.sign_in("chief", "secret123")
        console = client.admin
        assert await console.open() is AdminAccess.GRANTED
        assert console.has_incomplete_profiles
        with pytest.raises(LastAdminError):
            await console.delete_admin(console.admins[0].id)

        await console.add_admin("second@example.com", "二番目")
        assert [a.email for a in console.admins] == ["chief@example.com", "second@example.com"]
        await console.rename_admin(console.admins[0].id, "主任")
        assert not console.has_incomplete_profiles
        assert await console.delete_admin(console.admins[1].id)
        assert len(console.admins) == 1
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_errors_are_mapped(api: TestClient) -> None:
    api.post("/api/auth/register", json={"username": "nao", "email": "nao@example.com", "password": "secret123"})
    client = ApiClient("http://testserver", transport=asgi())
    identity = ApiIdentityProvider(client)
    records = ApiRecordStore(client)
    try:
        with pytest.raises(TransportFailure) as info:
            await records.query()
        assert info.value.status_code == 401

        await identity.sign_in("nao", "secret123")
        with pytest.raises(AuthorizationDenied):
            await records.query_all()
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_network_error_becomes_transport_failure() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ApiClient("http://testserver", transport=httpx.MockTransport(refuse))
    try:
        with pytest.raises(TransportFailure):
            await ApiRecordStore(client).query()
    finally:
        await client.aclose()


def test_page_enum_values() -> None:
    assert Page.parse("history") is Page.HISTORY
    assert Page.parse(None) is Page.CHAPTER_SELECTION


def replying(status_code: int, body=None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [{"detail": "quota"}, None, {"text": 42}, ["advice"]],
)
async def test_malformed_advice_reply_yields_no_advice(body) -> None:
    client = ApiClient("http://testserver", transport=replying(200, body))
    adapter = AdviceAdapter(ApiTextGenerator(client))
    try:
        assert await adapter.request_advice("prompt", {}) is None
        assert adapter.error == UNAVAILABLE_MESSAGE
        assert adapter.loading is False
        assert await adapter.advice_once("view", "prompt", {}) is None
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_advice_error_reply_yields_no_advice() -> None:
    client = ApiClient("http://testserver", transport=replying(502, {"detail": "Gemini error"}))
    adapter = AdviceAdapter(ApiTextGenerator(client))
    try:
        assert await adapter.request_advice("prompt", {"score": 50}) is None
        assert adapter.error == UNAVAILABLE_MESSAGE
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_advice_reply_is_stripped() -> None:
    client = ApiClient("http://testserver", transport=replying(200, {"text": "**よくできました**"}))
    try:
        assert await AdviceAdapter(ApiTextGenerator(client)).request_advice("prompt", {}) == "よくできました"
    finally:
        await client.aclose()


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [[{"chapter_id": 1, "score": 50}], {"detail": "oops"}, None, ["row"]],
)
async def test_malformed_score_rows_are_transport_failures(body) -> None:
    client = ApiClient("http://testserver", transport=replying(200, body))
    records = ApiRecordStore(client)
    try:
        with pytest.raises(TransportFailure):
            await records.query()
        with pytest.raises(TransportFailure):
            await records.query_all()
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_history_view_degrades_on_malformed_rows(catalog: Catalog, state: LocalStateStore) -> None:
    client = ApiClient("http://testserver", transport=replying(200, [{"chapter_id": 1, "score": 50}]))
    navigator = QuizNavigator(
        catalog,
        FakeIdentity(Session(user_id="42", display_name="山田")),
        HistoryStore(ApiRecordStore(client), state),
        state,
    )
    try:
        await navigator.start()
        assert await navigator.show_history() is True
        assert navigator.page is Page.HISTORY
        assert navigator.history_error
        assert navigator.history_rows == []
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_admin_console_degrades_on_malformed_rows() -> None:
    client = ApiClient("http://testserver", transport=replying(200, [{"chapter_id": 1}]))
    directory = FakeDirectory([AdminUser(id=1, email="a@example.com", display_name="A")])
    console = AdminConsole(directory, ApiRecordStore(client))
    try:
        assert await console.open() is AdminAccess.GRANTED
        assert console.entries == []
        assert console.error
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_malformed_admin_replies_are_transport_failures() -> None:
    client = ApiClient("http://testserver", transport=replying(200, [{"email": "a@example.com"}]))
    directory = ApiAdminDirectory(client)
    try:
        with pytest.raises(TransportFailure):
            await directory.list()
        with pytest.raises(TransportFailure):
            await directory.is_current_user_admin()
    finally:
        await client.aclose()


@pytest.mark.anyio
async def test_malformed_session_reply_leaves_client_signed_out(catalog: Catalog, state: LocalStateStore) -> None:
    client = ApiClient("http://testserver", token="stale", transport=replying(200, {"username": "nao"}))
    identity = ApiIdentityProvider(client)
    navigator = QuizNavigator(catalog, identity, HistoryStore(ApiRecordStore(client), state), state)
    try:
        await navigator.start()
        assert navigator.auth_state is AuthState.UNAUTHENTICATED
    finally:
        await client.aclose()
