"""HTTP API routes for note operations."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..dependencies import get_note_service, get_synchronizer
from ..middleware import get_owner_id
from ...models.links import Backlink, SyncResult
from ...models.note import Note, NoteCreate, NoteSummary, NoteUpdate
from ...services.backlinks import BacklinkSynchronizer
from ...services.errors import NoteGraphError, NoteNotFoundError
from ...services.notes import NoteService, SaveResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("", response_model=List[NoteSummary])
async def list_notes(
    parent_id: Optional[str] = Query(None, description="Optional folder filter"),
    owner_id: str = Depends(get_owner_id),
    service: NoteService = Depends(get_note_service),
):
    """List the owner's notes in creation order."""
    try:
        notes = await service.list_notes(owner_id, parent_id)
        return [
            NoteSummary(id=note.id, title=note.title, parent_id=note.parent_id, updated=note.updated)
            for note in notes
        ]
    except Exception as e:
        logger.error(f"Failed to list notes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list notes: {str(e)}",
        )


@router.post("", response_model=SaveResult, status_code=status.HTTP_201_CREATED)
async def create_note(
    create: NoteCreate,
    owner_id: str = Depends(get_owner_id),
    service: NoteService = Depends(get_note_service),
):
    """Create a note and index the wikilinks in its body."""
    try:
        return await service.create_note(owner_id, create.title, create.body, create.parent_id)
    except (HTTPException, NoteGraphError):
        raise
    except Exception as e:
        logger.error(f"Failed to create note: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create note: {str(e)}",
        )


@router.get("/{note_id}", response_model=Note)
async def get_note(note_id: str, service: NoteService = Depends(get_note_service)):
    """Get a note by id."""
    return await service.get_note(note_id)


@router.put("/{note_id}", response_model=SaveResult)
async def save_note(
    note_id: str,
    update: NoteUpdate,
    owner_id: str = Depends(get_owner_id),
    service: NoteService = Depends(get_note_service),
):
    """Save a note body, then rebuild its outgoing links.

    A failed link rebuild does not fail the save; it is reported in
    ``sync_error`` and repaired by the next save.
    """
    try:
        return await service.save_note(owner_id, note_id, update.body, update.title)
    except (HTTPException, NoteGraphError):
        raise
    except Exception as e:
        logger.error(f"Failed to save note: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save note: {str(e)}",
        )


@router.post("/{note_id}/sync", response_model=SyncResult)
async def sync_note_links(
    note_id: str,
    create_if_missing: Optional[bool] = Query(
        None, description="Create stub notes for unresolved links (defaults to config)"
    ),
    owner_id: str = Depends(get_owner_id),
    service: NoteService = Depends(get_note_service),
    synchronizer: BacklinkSynchronizer = Depends(get_synchronizer),
):
    """Re-run backlink synchronization from the stored body."""
    note = await service.get_note(note_id)
    return await synchronizer.synchronize_backlinks(
        owner_id, note.id, note.body, create_if_missing=create_if_missing
    )


@router.get("/{note_id}/backlinks", response_model=List[Backlink])
async def get_backlinks(note_id: str, service: NoteService = Depends(get_note_service)):
    """Edges pointing at this note."""
    try:
        return await service.get_backlinks(note_id)
    except NoteNotFoundError:
        raise
    except Exception as e:
        logger.error(f"Failed to get backlinks: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get backlinks: {str(e)}",
        )


@router.get("/{note_id}/links", response_model=List[Backlink])
async def get_outgoing_links(note_id: str, service: NoteService = Depends(get_note_service)):
    """Edges leaving this note."""
    return await service.get_outgoing_links(note_id)


__all__ = ["router"]
