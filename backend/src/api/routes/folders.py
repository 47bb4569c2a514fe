"""HTTP API routes for the folder tree."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_folder_service
from ..middleware import get_owner_id
from ...models.note import Folder, FolderCreate
from ...services.folders import FolderService

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.get("", response_model=List[Folder])
async def list_folders(
    parent_id: Optional[str] = Query(None, description="Parent folder; root when omitted"),
    owner_id: str = Depends(get_owner_id),
    folders: FolderService = Depends(get_folder_service),
):
    return folders.list_folders(owner_id, parent_id)


@router.post("", response_model=Folder, status_code=status.HTTP_201_CREATED)
async def create_folder(
    payload: FolderCreate,
    owner_id: str = Depends(get_owner_id),
    folders: FolderService = Depends(get_folder_service),
):
    """Create a folder under ``parent_id`` (404 if the parent is unknown)."""
    return folders.create_folder(owner_id, payload.name, payload.parent_id)
