"""Construction of a complete quiz client around one owned HTTP client."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx

from excel_quiz import config
from excel_quiz.client.admin_console import AdminConsole
from excel_quiz.client.advice import AdviceAdapter
from excel_quiz.client.api_client import (
    ApiAdminDirectory,
    ApiClient,
    ApiIdentityProvider,
    ApiRecordStore,
    ApiTextGenerator,
)
from excel_quiz.client.history_store import HistoryStore
from excel_quiz.client.local_state import LocalStateStore
from excel_quiz.client.navigation import QuizNavigator
from excel_quiz.quiz.catalog import Catalog, load_catalog


class QuizClient:
    """Owns the HTTP client; closing the quiz client closes it."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        *,
        base_url: Optional[str] = None,
        state_path: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.catalog = catalog or load_catalog(config.CHAPTERS_PATH)
        self.state = LocalStateStore(state_path or config.CLIENT_STATE_PATH)
        self.api = ApiClient(base_url, transport=transport)

        self.identity = ApiIdentityProvider(self.api, self.state)
        self.records = ApiRecordStore(self.api)
        self.directory = ApiAdminDirectory(self.api)
        self.history = HistoryStore(self.records, self.state)
        self.advice = AdviceAdapter(ApiTextGenerator(self.api))
        self.navigator = QuizNavigator(
            self.catalog, self.identity, self.history, self.state, advice=self.advice
        )
        self.admin = AdminConsole(self.directory, self.records)

    async def __aenter__(self) -> "QuizClient":
        await self.navigator.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.navigator.stop()
        self.admin.close()
        await self.api.aclose()
