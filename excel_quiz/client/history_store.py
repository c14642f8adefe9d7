"""
Score history for the current identity: an in-memory list mirrored to the
local state file, backed by the durable record store.

Local writes are a cache hint; a remote query result replaces the list
wholesale and is never merged entry by entry.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from excel_quiz.client.collaborators import RecordStore
from excel_quiz.client.local_state import HISTORY_KEY, LocalStateStore
from excel_quiz.errors import ConfirmationRequired, TransportFailure
from excel_quiz.quiz.history import sort_newest_first
from excel_quiz.quiz.scores import ScoreEntry

logger = logging.getLogger(__name__)


class HistoryStore:
    def __init__(self, records: RecordStore, state: LocalStateStore):
        self.records = records
        self.state = state
        self._entries: list[ScoreEntry] = self._load_mirror()

    def _load_mirror(self) -> list[ScoreEntry]:
        entries = []
        for raw in self.state.get(HISTORY_KEY, []) or []:
            try:
                entries.append(ScoreEntry.from_payload(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Dropping malformed history entry: {e}")
        return entries

    def _write_mirror(self) -> None:
        self.state.set(HISTORY_KEY, [entry.to_payload() for entry in self._entries])

    @property
    def entries(self) -> list[ScoreEntry]:
        """Most recent first."""
        return list(self._entries)

    async def append(self, entry: ScoreEntry) -> ScoreEntry:
        """Add locally first, then persist. A failed durable write is logged only."""
        self._entries.insert(0, entry)
        self._write_mirror()
        try:
            stored = await self.records.insert(entry)
        except TransportFailure as e:
            logger.error(f"Failed to store score for chapter {entry.chapter_id}: {e}")
            return entry
        # Carry the store's id until the next re-fetch replaces the list
        if self._entries and self._entries[0] is entry:
            self._entries[0] = stored
            self._write_mirror()
        return stored

    def replace_all(self, entries: Iterable[ScoreEntry]) -> None:
        self._entries = sort_newest_first(entries)
        self._write_mirror()

    async def fetch(self, chapter_id: Optional[int] = None) -> list[ScoreEntry]:
        """Query the durable store (newest first). Does not touch local state."""
        return sort_newest_first(await self.records.query(chapter_id))

    def clear_local(self) -> None:
        self._entries = []
        self.state.remove(HISTORY_KEY)

    async def clear_all(self, confirmed: bool = False) -> int:
        """Delete the identity's durable rows, then the local mirror.

        Raises:
            ConfirmationRequired: unless ``confirmed`` is true.
            TransportFailure: if the remote delete fails; local state is kept.
        """
        if not confirmed:
            raise ConfirmationRequired("Clearing history needs confirmation")
        deleted = await self.records.delete_mine()
        self.clear_local()
        logger.info(f"Cleared history ({deleted} stored scores)")
        return deleted
