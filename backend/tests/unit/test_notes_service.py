from unittest.mock import AsyncMock, patch

import pytest

from backend.src.services.backlinks import BacklinkSynchronizer
from backend.src.services.config import AppConfig
from backend.src.services.errors import NoteNotFoundError, PartialSyncError
from backend.src.services.notes import NoteService
from backend.src.services.store import SQLiteNoteStore

OWNER = "alice"


@pytest.fixture
def service(store: SQLiteNoteStore, app_config: AppConfig) -> NoteService:
    return NoteService(store, config=app_config)


@pytest.fixture
def auto_create_service(store: SQLiteNoteStore, tmp_path) -> NoteService:
    config = AppConfig(database_path=tmp_path / "notes.db", auto_create_on_miss=True)
    return NoteService(store, config=config)


@pytest.mark.asyncio
async def test_create_note_indexes_links(service: NoteService) -> None:
    target = (await service.create_note(OWNER, "Target")).note

    saved = await service.create_note(OWNER, "Source", "Links to [[Target]]")

    assert saved.sync is not None
    assert saved.sync.inserted == 1
    backlinks = await service.get_backlinks(target.id)
    assert [edge.from_note_id for edge in backlinks] == [saved.note.id]


@pytest.mark.asyncio
async def test_save_note_rebuilds_edges(service: NoteService) -> None:
    first = (await service.create_note(OWNER, "First")).note
    second = (await service.create_note(OWNER, "Second")).note
    source = (await service.create_note(OWNER, "Source", "[[First]]")).note

    saved = await service.save_note(OWNER, source.id, "now [[Second]]", title="Renamed")

    assert saved.note.title == "Renamed"
    assert saved.note.body == "now [[Second]]"
    assert await service.get_backlinks(first.id) == []
    outgoing = await service.get_outgoing_links(source.id)
    assert [edge.to_note_id for edge in outgoing] == [second.id]


@pytest.mark.asyncio
async def test_save_with_auto_create_makes_stub(auto_create_service: NoteService) -> None:
    source = (await auto_create_service.create_note(OWNER, "Source")).note

    saved = await auto_create_service.save_note(OWNER, source.id, "[[Brand New]]")

    assert [ref.title for ref in saved.sync.created_notes] == ["Brand New"]
    titles = [note.title for note in await auto_create_service.list_notes(OWNER)]
    assert titles == ["Source", "Brand New"]


@pytest.mark.asyncio
async def test_save_missing_note_raises(service: NoteService) -> None:
    with pytest.raises(NoteNotFoundError):
        await service.save_note(OWNER, "nope", "body")


@pytest.mark.asyncio
async def test_get_backlinks_for_missing_note_raises(service: NoteService) -> None:
    with pytest.raises(NoteNotFoundError):
        await service.get_backlinks("nope")


@pytest.mark.asyncio
async def test_partial_sync_keeps_saved_body(service: NoteService, store: SQLiteNoteStore) -> None:
    await service.create_note(OWNER, "Target")
    source = (await service.create_note(OWNER, "Source")).note
    error = PartialSyncError(source.id, inserted=0, failed=[("t", "Target")])

    with patch.object(
        BacklinkSynchronizer, "synchronize_backlinks", AsyncMock(side_effect=error)
    ):
        saved = await service.save_note(OWNER, source.id, "[[Target]]")

    assert saved.sync is None
    assert saved.sync_error == error.message
    assert (await store.get_note(source.id)).body == "[[Target]]"

    repaired = await service.save_note(OWNER, source.id, "[[Target]]")
    assert repaired.sync_error is None
    assert repaired.sync.inserted == 1


@pytest.mark.asyncio
async def test_unexpected_sync_failure_is_reported(service: NoteService) -> None:
    source = (await service.create_note(OWNER, "Source")).note

    with patch.object(
        BacklinkSynchronizer,
        "synchronize_backlinks",
        AsyncMock(side_effect=RuntimeError("boom")),
    ):
        saved = await service.save_note(OWNER, source.id, "text")

    assert saved.sync_error == "Backlink sync failed: boom"


@pytest.mark.asyncio
async def test_list_notes_by_parent(service: NoteService) -> None:
    await service.create_note(OWNER, "Root note")
    child = (await service.create_note(OWNER, "Child", parent_id="folder-1")).note

    notes = await service.list_notes(OWNER, parent_id="folder-1")

    assert [note.id for note in notes] == [child.id]
