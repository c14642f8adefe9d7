from pathlib import Path
from typing import Iterator

import anyio
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import excel_quiz.models.db  # noqa: F401
from excel_quiz import config
from excel_quiz.app import app
from excel_quiz.client.collaborators import AdminUser, SessionEvent
from excel_quiz.client.local_state import LocalStateStore
from excel_quiz.database import Base, get_db
from excel_quiz.errors import TransportFailure
from excel_quiz.quiz.catalog import BlankRef, Catalog, Chapter, load_catalog
from excel_quiz.quiz.history import filter_by_chapter


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# -- backend -----------------------------------------------------------


@pytest.fixture
def session_factory(tmp_path: Path) -> Iterator[sessionmaker]:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def api(session_factory: sessionmaker) -> Iterator[TestClient]:
    """TestClient against a throwaway database (startup hooks are not run)."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(
    client: TestClient,
    username: str,
    email: str | None = None,
    password: str = "secret123",
    display_name: str | None = None,
) -> dict[str, str]:
    response = client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
            "display_name": display_name,
        },
    )
    assert response.status_code == 201, response.text
    response = client.post(
        "/api/auth/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# -- client fakes ------------------------------------------------------


class FakeIdentity:
    def __init__(self, session=None):
        self.session = session
        self.handlers = []
        self.sign_out_calls = 0

    async def get_current_session(self):
        return self.session

    def on_session_change(self, handler):
        self.handlers.append(handler)
        return lambda: self.handlers.remove(handler)

    def emit(self, event, session):
        for handler in list(self.handlers):
            handler(event, session)

    def sign_in(self, session) -> None:
        self.session = session
        self.emit(SessionEvent.SIGNED_IN, session)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.session = None
        self.emit(SessionEvent.SIGNED_OUT, None)


class FakeRecords:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.fail = False
        self.calls = []
        # Set to hold query() until the test releases it
        self.gate: anyio.Event | None = None
        self.started: anyio.Event | None = None
        self._next_id = 1000

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise TransportFailure(f"{name} failed")

    async def insert(self, entry):
        self._check("insert")
        stored = entry.copy_with(id=self._next_id)
        self._next_id += 1
        self.rows.append(stored)
        return stored

    async def query(self, chapter_id=None):
        self._check("query")
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        return filter_by_chapter(self.rows, chapter_id)

    async def delete_by_id(self, score_id):
        self._check("delete_by_id")
        self.rows = [row for row in self.rows if row.id != score_id]

    async def delete_mine(self):
        self._check("delete_mine")
        count = len(self.rows)
        self.rows = []
        return count

    async def query_all(self):
        self._check("query_all")
        return list(self.rows)

    async def delete_any(self, score_id):
        self._check("delete_any")
        self.rows = [row for row in self.rows if row.id != score_id]


class FakeDirectory:
    def __init__(self, admins=None, allowed=True):
        self.admins = list(admins or [])
        self.allowed = allowed
        self.fail = False
        self.calls = []
        self.handlers = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise TransportFailure(f"{name} failed")

    def on_change(self, handler):
        self.handlers.append(handler)
        return lambda: self.handlers.remove(handler)

    async def _notify(self) -> None:
        for handler in list(self.handlers):
            await handler()

    async def is_current_user_admin(self):
        self.calls.append("is_admin")
        return self.allowed

    async def list(self):
        self._check("list")
        return sorted(self.admins, key=lambda admin: admin.email)

    async def insert(self, email, display_name):
        self._check("insert")
        admin = AdminUser(id=len(self.admins) + 1, email=email, display_name=display_name)
        self.admins.append(admin)
        await self._notify()
        return admin

    async def update(self, admin_id, display_name):
        self._check("update")
        updated = None
        for index, admin in enumerate(self.admins):
            if admin.id == admin_id:
                updated = AdminUser(id=admin.id, email=admin.email, display_name=display_name)
                self.admins[index] = updated
        await self._notify()
        return updated

    async def delete(self, admin_id):
        self._check("delete")
        self.admins = [admin for admin in self.admins if admin.id != admin_id]
        await self._notify()


class FakeGenerator:
    def __init__(self, text: str = "アドバイス", error: Exception | None = None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def catalog() -> Catalog:
    return load_catalog(config.CHAPTERS_PATH)


@pytest.fixture
def two_blank_chapter() -> Chapter:
    return Chapter(
        id=99,
        title="テスト",
        problem_description="",
        question_segments=("=", BlankRef("ア"), "(", BlankRef("イ"), ")"),
        blanks_in_order=("ア", "イ"),
        choices=("A", "B"),
        correct_answers={"ア": "A", "イ": "B"},
    )


@pytest.fixture
def state(tmp_path: Path) -> LocalStateStore:
    return LocalStateStore(tmp_path / "client_state.json")
