"""Note create/save flows that keep the link graph current."""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel

from ..models.links import Backlink, SyncResult
from ..models.note import Note
from .backlinks import BacklinkSynchronizer
from .config import AppConfig, get_config
from .errors import NoteNotFoundError, PartialSyncError
from .store import NoteStore

logger = logging.getLogger(__name__)


class SaveResult(BaseModel):
    """Saved note plus the outcome of the follow-up link sync.

    ``sync_error`` is set when the body was stored but the edges could not be
    fully rebuilt; saving again repairs them.
    """

    note: Note
    sync: Optional[SyncResult] = None
    sync_error: Optional[str] = None


class NoteService:
    """Orchestrates note persistence and backlink synchronization."""

    def __init__(
        self,
        store: NoteStore,
        synchronizer: BacklinkSynchronizer | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or get_config()
        self.synchronizer = synchronizer or BacklinkSynchronizer(store, config=self.config)

    async def create_note(
        self,
        owner_id: str,
        title: str,
        body: str = "",
        parent_id: Optional[str] = None,
    ) -> SaveResult:
        note = await self.store.create_note(owner_id, title, body, parent_id)
        logger.info(
            "Note created",
            extra={"owner_id": owner_id, "note_id": note.id, "parent_id": parent_id},
        )
        return await self._sync_after_write(owner_id, note)

    async def save_note(
        self,
        owner_id: str,
        note_id: str,
        body: str,
        title: Optional[str] = None,
    ) -> SaveResult:
        """Store the body first, then rebuild outgoing edges."""
        note = await self.store.update_note(note_id, body=body, title=title)
        if note is None:
            raise NoteNotFoundError(note_id)
        return await self._sync_after_write(owner_id, note)

    async def get_note(self, note_id: str) -> Note:
        note = await self.store.get_note(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def list_notes(self, owner_id: str, parent_id: Optional[str] = None) -> List[Note]:
        return await self.store.list_notes(owner_id, parent_id)

    async def get_backlinks(self, note_id: str) -> List[Backlink]:
        await self.get_note(note_id)
        return await self.synchronizer.backlinks(note_id)

    async def get_outgoing_links(self, note_id: str) -> List[Backlink]:
        await self.get_note(note_id)
        return await self.synchronizer.outgoing(note_id)

    async def _sync_after_write(self, owner_id: str, note: Note) -> SaveResult:
        try:
            sync = await self.synchronizer.synchronize_backlinks(
                owner_id,
                note.id,
                note.body,
                create_if_missing=self.config.auto_create_on_miss,
            )
        except PartialSyncError as exc:
            return SaveResult(note=note, sync_error=exc.message)
        except Exception as exc:
            logger.exception(
                "Backlink sync failed after save",
                extra={"owner_id": owner_id, "note_id": note.id},
            )
            return SaveResult(note=note, sync_error=f"Backlink sync failed: {exc}")
        return SaveResult(note=note, sync=sync)


__all__ = ["NoteService", "SaveResult"]
