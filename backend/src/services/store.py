"""Persistent store interface for notes and link edges, with a SQLite backend."""

from __future__ import annotations

import abc
import asyncio
from datetime import datetime, timezone
import logging
import sqlite3
from typing import Callable, List, Optional, TypeVar
import uuid

from ..models.links import Backlink
from ..models.note import Note, NoteRef
from .database import DatabaseService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _row_to_note(row: sqlite3.Row) -> Note:
    return Note(
        id=row["id"],
        owner_id=row["owner_id"],
        title=row["title"],
        body=row["body"],
        parent_id=row["parent_id"],
        created=datetime.fromisoformat(row["created"]),
        updated=datetime.fromisoformat(row["updated"]),
    )


def _row_to_edge(row: sqlite3.Row) -> Backlink:
    return Backlink(
        from_note_id=row["from_note_id"],
        to_note_id=row["to_note_id"],
        anchor_text=row["anchor_text"],
        created=datetime.fromisoformat(row["created"]),
    )


class NoteStore(abc.ABC):
    """Async collaborator that persists notes and the directed link graph.

    Title lookups return matches in the store's default order (insertion
    order); callers take the first element as the tie-break.
    """

    @abc.abstractmethod
    async def find_exact(self, owner_id: str, title: str, *, limit: int = 1) -> List[NoteRef]:
        """Notes whose trimmed title equals ``title`` case-insensitively."""

    @abc.abstractmethod
    async def find_contains(
        self, owner_id: str, text: str, *, limit: int = 1
    ) -> List[NoteRef]:
        """Notes whose title contains ``text`` case-insensitively."""

    @abc.abstractmethod
    async def create_note(
        self, owner_id: str, title: str, body: str, parent_id: Optional[str] = None
    ) -> Note:
        ...

    @abc.abstractmethod
    async def get_note(self, note_id: str) -> Optional[Note]:
        ...

    @abc.abstractmethod
    async def update_note(
        self, note_id: str, *, body: str, title: Optional[str] = None
    ) -> Optional[Note]:
        """Persist new content; returns ``None`` if the note does not exist."""

    @abc.abstractmethod
    async def list_notes(self, owner_id: str, parent_id: Optional[str] = None) -> List[Note]:
        ...

    @abc.abstractmethod
    async def delete_edges(self, from_note_id: str) -> int:
        """Remove every outgoing edge of ``from_note_id``; returns the count removed."""

    @abc.abstractmethod
    async def insert_edge(
        self, owner_id: str, from_note_id: str, to_note_id: str, anchor_text: str
    ) -> None:
        """Insert one edge; raises on failure."""

    @abc.abstractmethod
    async def list_outgoing_edges(self, from_note_id: str) -> List[Backlink]:
        ...

    @abc.abstractmethod
    async def list_backlinks(self, to_note_id: str) -> List[Backlink]:
        ...


class SQLiteNoteStore(NoteStore):
    """``NoteStore`` backed by the shared SQLite schema.

    Each call opens its own connection inside a worker thread so the event
    loop is never blocked.
    """

    def __init__(self, db_service: DatabaseService | None = None) -> None:
        self.db_service = db_service or DatabaseService()

    async def _run(self, func: Callable[[sqlite3.Connection], T]) -> T:
        def _call() -> T:
            conn = self.db_service.connect()
            try:
                with conn:
                    return func(conn)
            finally:
                conn.close()

        return await asyncio.to_thread(_call)

    async def find_exact(self, owner_id: str, title: str, *, limit: int = 1) -> List[NoteRef]:
        needle = title.strip().casefold()

        def _query(conn: sqlite3.Connection) -> List[NoteRef]:
            rows = conn.execute(
                """
                SELECT id, title FROM notes
                WHERE owner_id = ? AND casefold(trim(title)) = ?
                ORDER BY rowid
                LIMIT ?
                """,
                (owner_id, needle, limit),
            ).fetchall()
            return [NoteRef(id=row["id"], title=row["title"]) for row in rows]

        return await self._run(_query)

    async def find_contains(
        self, owner_id: str, text: str, *, limit: int = 1
    ) -> List[NoteRef]:
        needle = text.strip().casefold()

        def _query(conn: sqlite3.Connection) -> List[NoteRef]:
            # instr() keeps '%' and '_' in the display text literal.
            rows = conn.execute(
                """
                SELECT id, title FROM notes
                WHERE owner_id = ? AND instr(casefold(title), ?) > 0
                ORDER BY rowid
                LIMIT ?
                """,
                (owner_id, needle, limit),
            ).fetchall()
            return [NoteRef(id=row["id"], title=row["title"]) for row in rows]

        return await self._run(_query)

    async def create_note(
        self, owner_id: str, title: str, body: str, parent_id: Optional[str] = None
    ) -> Note:
        note_id = uuid.uuid4().hex
        now = _utcnow_iso()

        def _insert(conn: sqlite3.Connection) -> Note:
            conn.execute(
                """
                INSERT INTO notes (id, owner_id, title, body, parent_id, created, updated)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (note_id, owner_id, title, body, parent_id, now, now),
            )
            row = conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
            return _row_to_note(row)

        note = await self._run(_insert)
        logger.debug(
            "Note row inserted",
            extra={"owner_id": owner_id, "note_id": note_id, "title": title},
        )
        return note

    async def get_note(self, note_id: str) -> Optional[Note]:
        def _query(conn: sqlite3.Connection) -> Optional[Note]:
            row = conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
            return _row_to_note(row) if row else None

        return await self._run(_query)

    async def update_note(
        self, note_id: str, *, body: str, title: Optional[str] = None
    ) -> Optional[Note]:
        now = _utcnow_iso()

        def _update(conn: sqlite3.Connection) -> Optional[Note]:
            if title is None:
                cursor = conn.execute(
                    "UPDATE notes SET body = ?, updated = ? WHERE id = ?",
                    (body, now, note_id),
                )
            else:
                cursor = conn.execute(
                    "UPDATE notes SET title = ?, body = ?, updated = ? WHERE id = ?",
                    (title, body, now, note_id),
                )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
            return _row_to_note(row)

        return await self._run(_update)

    async def list_notes(self, owner_id: str, parent_id: Optional[str] = None) -> List[Note]:
        def _query(conn: sqlite3.Connection) -> List[Note]:
            if parent_id is None:
                rows = conn.execute(
                    "SELECT * FROM notes WHERE owner_id = ? ORDER BY rowid",
                    (owner_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM notes WHERE owner_id = ? AND parent_id = ? ORDER BY rowid",
                    (owner_id, parent_id),
                ).fetchall()
            return [_row_to_note(row) for row in rows]

        return await self._run(_query)

    async def delete_edges(self, from_note_id: str) -> int:
        def _delete(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                "DELETE FROM note_links WHERE from_note_id = ?", (from_note_id,)
            )
            return cursor.rowcount

        return await self._run(_delete)

    async def insert_edge(
        self, owner_id: str, from_note_id: str, to_note_id: str, anchor_text: str
    ) -> None:
        now = _utcnow_iso()

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT INTO note_links (owner_id, from_note_id, to_note_id, anchor_text, created)
                VALUES (?, ?, ?, ?, ?)
                """,
                (owner_id, from_note_id, to_note_id, anchor_text, now),
            )

        await self._run(_insert)

    async def list_outgoing_edges(self, from_note_id: str) -> List[Backlink]:
        def _query(conn: sqlite3.Connection) -> List[Backlink]:
            rows = conn.execute(
                "SELECT * FROM note_links WHERE from_note_id = ? ORDER BY rowid",
                (from_note_id,),
            ).fetchall()
            return [_row_to_edge(row) for row in rows]

        return await self._run(_query)

    async def list_backlinks(self, to_note_id: str) -> List[Backlink]:
        def _query(conn: sqlite3.Connection) -> List[Backlink]:
            rows = conn.execute(
                "SELECT * FROM note_links WHERE to_note_id = ? ORDER BY rowid",
                (to_note_id,),
            ).fetchall()
            return [_row_to_edge(row) for row in rows]

        return await self._run(_query)


__all__ = ["NoteStore", "SQLiteNoteStore"]
