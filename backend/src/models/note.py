"""Note-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NoteRef(BaseModel):
    """Minimal projection returned by title lookups."""

    id: str
    title: str


class Note(BaseModel):
    """Complete note with Markdown body."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5f0c6a52c1d44b0e9a3c2c9f1b7f4a10",
                "owner_id": "alice",
                "title": "API Design",
                "body": "# API Design\\n\\nSee [[Endpoints]] and [[Auth Flow]].",
                "parent_id": None,
                "created": "2025-01-10T09:00:00Z",
                "updated": "2025-01-15T14:30:00Z",
            }
        }
    )

    id: str = Field(..., min_length=1, description="Opaque note identifier")
    owner_id: str = Field(..., min_length=1, description="Owner user ID")
    title: str = Field(..., min_length=1, description="Display title")
    body: str = Field("", description="Markdown content")
    parent_id: Optional[str] = Field(None, description="Containing folder, if any")
    created: datetime = Field(..., description="Creation timestamp")
    updated: datetime = Field(..., description="Last update timestamp")


class NoteCreate(BaseModel):
    """Request payload to create a note."""

    title: str = Field(..., min_length=1, max_length=512)
    body: str = Field("", max_length=1_048_576)
    parent_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title must not be blank")
        return cleaned


class NoteUpdate(BaseModel):
    """Request payload to save a note."""

    title: Optional[str] = Field(None, max_length=512)
    body: str = Field(..., max_length=1_048_576)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title must not be blank")
        return cleaned


class Folder(BaseModel):
    """Folder grouping notes and subfolders."""

    id: str
    owner_id: str
    name: str
    parent_id: Optional[str] = None


class FolderCreate(BaseModel):
    """Request payload to create a folder."""

    name: str = Field(..., min_length=1, max_length=256)
    parent_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Folder name must not be blank")
        return cleaned


class NoteSummary(BaseModel):
    """Lightweight representation used for listings."""

    id: str
    title: str
    parent_id: Optional[str] = None
    updated: datetime


__all__ = [
    "NoteRef",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "NoteSummary",
    "Folder",
    "FolderCreate",
]
