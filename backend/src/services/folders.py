"""Folder Service - the tree that groups notes for folder-wide study."""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional
import uuid

from ..models.note import Folder
from .database import DatabaseService
from .errors import FolderNotFoundError

logger = logging.getLogger(__name__)


def _row_to_folder(row: sqlite3.Row) -> Folder:
    return Folder(
        id=row["id"], owner_id=row["owner_id"], name=row["name"], parent_id=row["parent_id"]
    )


class FolderService:
    """Create and list folders; a ``None`` parent is the root."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def create_folder(self, owner_id: str, name: str, parent_id: Optional[str] = None) -> Folder:
        conn = self._db.connect()
        try:
            with conn:
                if parent_id is not None and not self._exists(conn, owner_id, parent_id):
                    raise FolderNotFoundError(parent_id)
                folder_id = uuid.uuid4().hex
                conn.execute(
                    "INSERT INTO folders (id, owner_id, name, parent_id) VALUES (?, ?, ?, ?)",
                    (folder_id, owner_id, name, parent_id),
                )
        finally:
            conn.close()

        logger.info(
            "Created folder",
            extra={"owner_id": owner_id, "folder_id": folder_id, "parent_id": parent_id},
        )
        return Folder(id=folder_id, owner_id=owner_id, name=name, parent_id=parent_id)

    def list_folders(self, owner_id: str, parent_id: Optional[str] = None) -> List[Folder]:
        """Direct children of ``parent_id`` in creation order."""
        conn = self._db.connect()
        try:
            if parent_id is not None and not self._exists(conn, owner_id, parent_id):
                raise FolderNotFoundError(parent_id)
            rows = conn.execute(
                "SELECT * FROM folders WHERE owner_id = ? AND parent_id IS ? ORDER BY rowid",
                (owner_id, parent_id),
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_folder(row) for row in rows]

    @staticmethod
    def _exists(conn: sqlite3.Connection, owner_id: str, folder_id: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM folders WHERE owner_id = ? AND id = ?", (owner_id, folder_id)
        ).fetchone()
        return row is not None


__all__ = ["FolderService"]
