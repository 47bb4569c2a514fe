import sqlite3
from unittest.mock import AsyncMock, patch

import pytest

from backend.src.models.links import ResolvedLink
from backend.src.services.backlinks import BacklinkSynchronizer, dedupe_links
from backend.src.services.config import AppConfig
from backend.src.services.errors import PartialSyncError
from backend.src.services.store import SQLiteNoteStore

OWNER = "alice"


@pytest.fixture
def synchronizer(store: SQLiteNoteStore, app_config: AppConfig) -> BacklinkSynchronizer:
    return BacklinkSynchronizer(store, config=app_config)


def _edges(edges):
    return sorted((edge.to_note_id, edge.anchor_text) for edge in edges)


def test_dedupe_links_keeps_first_occurrence() -> None:
    links = [
        ResolvedLink(anchor_text="X", to_note_id="1"),
        ResolvedLink(anchor_text="Y", to_note_id="2"),
        ResolvedLink(anchor_text="X", to_note_id="1"),
    ]

    assert dedupe_links(links) == links[:2]


@pytest.mark.asyncio
async def test_sync_creates_edge_per_resolved_reference(store, synchronizer) -> None:
    target = await store.create_note(OWNER, "Target", "")
    other = await store.create_note(OWNER, "Other", "")
    source = await store.create_note(OWNER, "Source", "")

    result = await synchronizer.synchronize_backlinks(
        OWNER, source.id, "[[Target]] and [[Other]]"
    )

    assert result.inserted == 2
    assert _edges(await store.list_outgoing_edges(source.id)) == sorted(
        [(target.id, "Target"), (other.id, "Other")]
    )
    backlinks = await store.list_backlinks(target.id)
    assert [(edge.from_note_id, edge.anchor_text) for edge in backlinks] == [
        (source.id, "Target")
    ]


@pytest.mark.asyncio
async def test_repeated_reference_yields_single_edge(store, synchronizer) -> None:
    target = await store.create_note(OWNER, "X", "")
    source = await store.create_note(OWNER, "Source", "")

    result = await synchronizer.synchronize_backlinks(OWNER, source.id, "[[X]] and [[X]]")

    assert result.inserted == 1
    assert _edges(await store.list_outgoing_edges(source.id)) == [(target.id, "X")]


@pytest.mark.asyncio
async def test_different_anchors_to_same_note_are_separate_edges(store, synchronizer) -> None:
    target = await store.create_note(OWNER, "Project Plan", "")
    source = await store.create_note(OWNER, "Source", "")

    await synchronizer.synchronize_backlinks(
        OWNER, source.id, "[[Project Plan]] vs [[project plan]]"
    )

    assert _edges(await store.list_outgoing_edges(source.id)) == sorted(
        [(target.id, "Project Plan"), (target.id, "project plan")]
    )


@pytest.mark.asyncio
async def test_anchor_text_is_kept_after_substring_match(store, synchronizer) -> None:
    target = await store.create_note(OWNER, "Quarterly Project Review", "")
    source = await store.create_note(OWNER, "Source", "")

    await synchronizer.synchronize_backlinks(OWNER, source.id, "See [[project]].")

    edges = await store.list_outgoing_edges(source.id)
    assert [(edge.to_note_id, edge.anchor_text) for edge in edges] == [(target.id, "project")]


@pytest.mark.asyncio
async def test_sync_is_idempotent(store, synchronizer) -> None:
    await store.create_note(OWNER, "Target", "")
    source = await store.create_note(OWNER, "Source", "")
    body = "[[Target]] [[Target]] [[Missing]]"

    await synchronizer.synchronize_backlinks(OWNER, source.id, body)
    first = _edges(await store.list_outgoing_edges(source.id))
    second_result = await synchronizer.synchronize_backlinks(OWNER, source.id, body)

    assert _edges(await store.list_outgoing_edges(source.id)) == first
    assert second_result.removed == 1
    assert second_result.inserted == 1


@pytest.mark.asyncio
async def test_removed_reference_drops_edge(store, synchronizer) -> None:
    await store.create_note(OWNER, "Target", "")
    source = await store.create_note(OWNER, "Source", "")

    await synchronizer.synchronize_backlinks(OWNER, source.id, "[[Target]]")
    result = await synchronizer.synchronize_backlinks(OWNER, source.id, "no links now")

    assert result.removed == 1
    assert await store.list_outgoing_edges(source.id) == []


@pytest.mark.asyncio
async def test_misses_produce_no_edge_without_creation(store, synchronizer) -> None:
    source = await store.create_note(OWNER, "Source", "")

    result = await synchronizer.synchronize_backlinks(
        OWNER, source.id, "[[Ghost]]", create_if_missing=False
    )

    assert result.misses == ["Ghost"]
    assert result.inserted == 0
    assert len(await store.list_notes(OWNER)) == 1


@pytest.mark.asyncio
async def test_create_if_missing_creates_one_stub_per_text(store, synchronizer) -> None:
    source = await store.create_note(OWNER, "Source", "")

    result = await synchronizer.synchronize_backlinks(
        OWNER, source.id, "[[Idea]] [[idea]] [[IDEA]]", create_if_missing=True
    )

    notes = await store.list_notes(OWNER)
    assert [note.title for note in notes] == ["Source", "Idea"]
    assert [ref.title for ref in result.created_notes] == ["Idea"]
    assert {edge.to_note_id for edge in await store.list_outgoing_edges(source.id)} == {
        notes[1].id
    }


@pytest.mark.asyncio
async def test_self_reference_creates_self_edge(store, synchronizer) -> None:
    source = await store.create_note(OWNER, "Loop", "")

    await synchronizer.synchronize_backlinks(OWNER, source.id, "I link to [[Loop]]")

    assert _edges(await store.list_outgoing_edges(source.id)) == [(source.id, "Loop")]


@pytest.mark.asyncio
async def test_missing_source_note_is_skipped(store, synchronizer) -> None:
    await store.create_note(OWNER, "Target", "")

    result = await synchronizer.synchronize_backlinks(OWNER, "deleted-id", "[[Target]]")

    assert result.skipped
    assert await store.list_outgoing_edges("deleted-id") == []


@pytest.mark.asyncio
async def test_partial_failure_reports_and_next_sync_repairs(store, synchronizer) -> None:
    first = await store.create_note(OWNER, "First", "")
    second = await store.create_note(OWNER, "Second", "")
    source = await store.create_note(OWNER, "Source", "")
    body = "[[First]] [[Second]]"

    real_insert = store.insert_edge

    async def flaky_insert(owner_id, from_note_id, to_note_id, anchor_text):
        if to_note_id == second.id:
            raise sqlite3.OperationalError("database is locked")
        await real_insert(owner_id, from_note_id, to_note_id, anchor_text)

    with patch.object(store, "insert_edge", AsyncMock(side_effect=flaky_insert)):
        with pytest.raises(PartialSyncError) as excinfo:
            await synchronizer.synchronize_backlinks(OWNER, source.id, body)

    assert excinfo.value.inserted == 1
    assert excinfo.value.failed == [(second.id, "Second")]
    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
    assert _edges(await store.list_outgoing_edges(source.id)) == [(first.id, "First")]

    result = await synchronizer.synchronize_backlinks(OWNER, source.id, body)

    assert result.inserted == 2
    assert _edges(await store.list_outgoing_edges(source.id)) == sorted(
        [(first.id, "First"), (second.id, "Second")]
    )


@pytest.mark.asyncio
async def test_apply_replaces_edges_with_given_links(store, synchronizer) -> None:
    target = await store.create_note(OWNER, "Target", "")
    source = await store.create_note(OWNER, "Source", "")

    result = await synchronizer.apply(
        OWNER, source.id, [ResolvedLink(anchor_text="T", to_note_id=target.id)]
    )

    assert result.inserted == 1
    assert _edges(await synchronizer.outgoing(source.id)) == [(target.id, "T")]
    assert [edge.from_note_id for edge in await synchronizer.backlinks(target.id)] == [source.id]
