"""Wikilink, resolution and link-graph models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .note import NoteRef

MatchKind = Literal["exact", "contains", "created"]


class Reference(BaseModel):
    """A ``[[...]]`` span inside a note body."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="Trimmed display text")
    start: int = Field(..., ge=0, description="Offset of the opening '[[' (inclusive)")
    end: int = Field(..., ge=0, description="Offset after the closing ']]' (exclusive)")

    @model_validator(mode="after")
    def _check_span(self) -> "Reference":
        if self.end <= self.start:
            raise ValueError("Reference end must be greater than start")
        return self


class Backlink(BaseModel):
    """Directed edge between two notes, labelled with the anchor text."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "from_note_id": "a1",
                "to_note_id": "b2",
                "anchor_text": "Endpoints",
            }
        },
    )

    from_note_id: str
    to_note_id: str
    anchor_text: str
    created: Optional[datetime] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.to_note_id, self.anchor_text)


class Resolution(BaseModel):
    """Outcome of resolving one display text."""

    display_text: str
    note_id: Optional[str] = Field(None, description="Null on a resolution miss")
    title: Optional[str] = None
    matched_by: Optional[MatchKind] = None

    @property
    def is_miss(self) -> bool:
        return self.note_id is None

    @property
    def created(self) -> bool:
        return self.matched_by == "created"


class ResolvedLink(BaseModel):
    """A reference paired with the note it resolved to."""

    model_config = ConfigDict(frozen=True)

    anchor_text: str
    to_note_id: str


class SyncResult(BaseModel):
    """Summary of one backlink synchronization."""

    from_note_id: str
    skipped: bool = Field(False, description="True when the source note no longer exists")
    removed: int = Field(0, ge=0)
    inserted: int = Field(0, ge=0)
    created_notes: List[NoteRef] = Field(default_factory=list)
    misses: List[str] = Field(default_factory=list, description="Display texts left unresolved")


class WikilinkSuggestions(BaseModel):
    """Suggestions for an unterminated ``[[partial`` at the cursor."""

    partial: str
    start: int = Field(..., ge=0, description="Replacement range start (after '[[')")
    end: int = Field(..., ge=0, description="Replacement range end (before ']]' if present)")
    suggestions: List[NoteRef] = Field(default_factory=list)


__all__ = [
    "MatchKind",
    "Reference",
    "Backlink",
    "Resolution",
    "ResolvedLink",
    "SyncResult",
    "WikilinkSuggestions",
]
