"""HTTP API routes for wikilink extraction, resolution and suggestions."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from ..dependencies import get_resolver
from ..middleware import get_owner_id
from ...models.links import Reference, Resolution, WikilinkSuggestions
from ...services.resolver import NoteResolver, ResolveOptions
from ...services.wikilinks import MAX_SUGGESTIONS, extract_references, find_open_wikilink

router = APIRouter(prefix="/api/references", tags=["references"])


class ExtractRequest(BaseModel):
    """Body to scan for wikilinks."""

    body: str = Field(..., max_length=1_048_576)


class ResolveRequest(BaseModel):
    """Display text to resolve against the owner's notes."""

    display_text: str = Field(..., min_length=1, max_length=512)
    create_if_missing: bool = False

    @field_validator("display_text")
    @classmethod
    def _strip_display_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Display text must not be blank")
        return cleaned


@router.post("/extract", response_model=List[Reference])
async def extract(request: ExtractRequest):
    """Wikilinks in source order, duplicates included."""
    return extract_references(request.body)


@router.post("/resolve", response_model=Resolution)
async def resolve(
    request: ResolveRequest,
    owner_id: str = Depends(get_owner_id),
    resolver: NoteResolver = Depends(get_resolver),
):
    """Resolve one display text; a miss returns ``note_id: null``."""
    return await resolver.resolve(
        owner_id,
        request.display_text,
        ResolveOptions(create_if_missing=request.create_if_missing),
    )


@router.get("/open", response_model=Resolution)
async def open_reference(
    text: str = Query(..., min_length=1, max_length=512),
    owner_id: str = Depends(get_owner_id),
    resolver: NoteResolver = Depends(get_resolver),
):
    """Follow a clicked wikilink.

    Responds 404 with ``action: create`` when nothing matches so the client
    can offer to create the note.
    """
    display_text = text.strip()
    if not display_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "validation_error", "message": "Display text must not be blank"},
        )
    return await resolver.require(owner_id, display_text)


@router.get("/suggest", response_model=Optional[WikilinkSuggestions])
async def suggest(
    text: str = Query(..., max_length=1_048_576),
    cursor: int = Query(..., ge=0),
    limit: int = Query(MAX_SUGGESTIONS, ge=1, le=50),
    owner_id: str = Depends(get_owner_id),
    resolver: NoteResolver = Depends(get_resolver),
):
    """Title suggestions for the ``[[partial`` being typed at ``cursor``.

    Returns null when the cursor is not inside an open wikilink.
    """
    located = find_open_wikilink(text, cursor)
    if located is None:
        return None
    partial, start, end = located
    matches = await resolver.search_titles(owner_id, partial, limit=limit)
    return WikilinkSuggestions(partial=partial, start=start, end=end, suggestions=matches)


__all__ = ["router"]
