"""SQLite database helpers for the notes, link graph and flashcard schema."""

from __future__ import annotations

from pathlib import Path
import sqlite3
from typing import Iterable, Optional

from .config import get_config

DDL_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS folders (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        parent_id TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_folders_parent ON folders(owner_id, parent_id)",
    """
    CREATE TABLE IF NOT EXISTS notes (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        title TEXT NOT NULL,
        body TEXT NOT NULL DEFAULT '',
        parent_id TEXT,
        created TEXT NOT NULL,
        updated TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_notes_owner ON notes(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_notes_parent ON notes(owner_id, parent_id)",
    """
    CREATE TABLE IF NOT EXISTS note_links (
        owner_id TEXT NOT NULL,
        from_note_id TEXT NOT NULL,
        to_note_id TEXT NOT NULL,
        anchor_text TEXT NOT NULL,
        created TEXT NOT NULL,
        PRIMARY KEY (from_note_id, to_note_id, anchor_text)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_links_from ON note_links(from_note_id)",
    "CREATE INDEX IF NOT EXISTS idx_links_to ON note_links(to_note_id)",
    """
    CREATE TABLE IF NOT EXISTS decks (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        is_public INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS note_deck_links (
        note_id TEXT NOT NULL,
        deck_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        PRIMARY KEY (note_id, deck_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cards (
        id TEXT PRIMARY KEY,
        deck_id TEXT NOT NULL,
        type TEXT NOT NULL DEFAULT 'traditional',
        front TEXT NOT NULL DEFAULT '',
        back TEXT NOT NULL DEFAULT '',
        question TEXT,
        options TEXT,
        correct_answers TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards(deck_id)",
)


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class DatabaseService:
    """Manage SQLite connections and schema initialization."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else get_config().database_path

    def _ensure_directory(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        """Return a sqlite3 connection with the proper data directory created."""
        self._ensure_directory()
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        # Unicode-aware case folding; SQLite's lower() only handles ASCII.
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    def initialize(self, statements: Iterable[str] | None = None) -> Path:
        """Create all schema artifacts."""
        conn = self.connect()
        try:
            with conn:  # Transactional apply of DDL
                for statement in statements or DDL_STATEMENTS:
                    conn.execute(statement)
        finally:
            conn.close()
        return self.db_path


def init_database(db_path: str | Path | None = None) -> Path:
    """Convenience wrapper used at application startup."""
    return DatabaseService(db_path).initialize()


__all__ = ["DatabaseService", "init_database", "DDL_STATEMENTS"]
