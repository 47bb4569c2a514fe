"""Flashcard Service - decks and cards derived from notes."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import sqlite3
from typing import Iterable, List, Optional, Sequence
import uuid

from ..models.flashcard import Deck, Flashcard, FlashcardUpdate
from ..models.quiz import BulkCard, QuizOption, QuizQuestion
from .database import DatabaseService
from .errors import FlashcardError

logger = logging.getLogger(__name__)

DECK_NAME_PREFIX = "Flashcards: "


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _row_to_card(row: sqlite3.Row) -> Flashcard:
    options = json.loads(row["options"]) if row["options"] else []
    correct = json.loads(row["correct_answers"]) if row["correct_answers"] else []
    return Flashcard(
        id=row["id"],
        deck_id=row["deck_id"],
        type=row["type"],
        front=row["front"],
        back=row["back"],
        question=row["question"],
        options=[QuizOption(**option) for option in options],
        correct_answers=correct,
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def format_correct_answers(question: QuizQuestion) -> str:
    """Readable answer side for a multiple-choice card, e.g. ``b) París``."""
    by_letter = {option.letter: option.text for option in question.options}
    return "\n".join(f"{letter}) {by_letter[letter]}" for letter in question.correct_answers)


class FlashcardService:
    """Persist decks and cards; one deck per note."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def get_or_create_deck_for_note(self, owner_id: str, note_id: str, note_title: str) -> Deck:
        """Return the note's deck, creating ``Flashcards: <title>`` on first use."""
        conn = self._db.connect()
        try:
            with conn:
                row = conn.execute(
                    """
                    SELECT d.* FROM note_deck_links l
                    JOIN decks d ON d.id = l.deck_id
                    WHERE l.note_id = ?
                    ORDER BY l.created_at
                    LIMIT 1
                    """,
                    (note_id,),
                ).fetchone()
                if row is not None:
                    return self._row_to_deck(row)

                deck_id = uuid.uuid4().hex
                now = _utcnow_iso()
                conn.execute(
                    """
                    INSERT INTO decks (id, owner_id, name, is_public, created_at)
                    VALUES (?, ?, ?, 0, ?)
                    """,
                    (deck_id, owner_id, f"{DECK_NAME_PREFIX}{note_title}", now),
                )
                conn.execute(
                    "INSERT INTO note_deck_links (note_id, deck_id, created_at) VALUES (?, ?, ?)",
                    (note_id, deck_id, now),
                )
            logger.info(
                "Created deck for note",
                extra={"owner_id": owner_id, "note_id": note_id, "deck_id": deck_id},
            )
            return Deck(
                id=deck_id,
                owner_id=owner_id,
                name=f"{DECK_NAME_PREFIX}{note_title}",
                is_public=False,
                created_at=datetime.fromisoformat(now),
            )
        finally:
            conn.close()

    def import_quiz_questions(
        self,
        owner_id: str,
        note_id: str,
        note_title: str,
        questions: Sequence[QuizQuestion],
    ) -> List[Flashcard]:
        """Store parsed questions as multiple-choice cards in the note's deck."""
        if not questions:
            raise FlashcardError("no_questions", "No questions to import")

        deck = self.get_or_create_deck_for_note(owner_id, note_id, note_title)
        rows = [
            (
                "multiple_choice",
                question.question,
                format_correct_answers(question),
                question.question,
                json.dumps([option.model_dump() for option in question.options], ensure_ascii=False),
                json.dumps(question.correct_answers),
            )
            for question in questions
        ]
        cards = self._insert_cards(deck.id, rows)
        logger.info(
            "Imported quiz questions",
            extra={"owner_id": owner_id, "note_id": note_id, "cards": len(cards)},
        )
        return cards

    def add_cards(
        self, owner_id: str, note_id: str, note_title: str, cards: Sequence[BulkCard]
    ) -> List[Flashcard]:
        """Store front/back cards in the note's deck."""
        if not cards:
            raise FlashcardError("no_cards", "No cards to add")

        deck = self.get_or_create_deck_for_note(owner_id, note_id, note_title)
        rows = [("traditional", card.front, card.back, None, None, None) for card in cards]
        return self._insert_cards(deck.id, rows)

    def get_flashcards_for_note(self, note_id: str) -> List[Flashcard]:
        return self.get_flashcards_for_notes([note_id])

    def get_flashcards_for_notes(self, note_ids: Iterable[str]) -> List[Flashcard]:
        ids = list(dict.fromkeys(note_ids))
        if not ids:
            return []

        placeholders = ", ".join("?" for _ in ids)
        conn = self._db.connect()
        try:
            rows = conn.execute(
                f"""
                SELECT c.* FROM cards c
                JOIN note_deck_links l ON l.deck_id = c.deck_id
                WHERE l.note_id IN ({placeholders})
                ORDER BY c.rowid
                """,
                ids,
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_card(row) for row in rows]

    def get_note_ids_in_folder(self, owner_id: str, folder_id: Optional[str]) -> List[str]:
        """Notes in ``folder_id`` and all of its subfolders (``None`` = root)."""
        conn = self._db.connect()
        try:
            note_ids: List[str] = []
            pending: List[Optional[str]] = [folder_id]
            visited: set[Optional[str]] = set()
            while pending:
                current = pending.pop(0)
                if current in visited:
                    continue
                visited.add(current)
                note_rows = conn.execute(
                    "SELECT id FROM notes WHERE owner_id = ? AND parent_id IS ? ORDER BY rowid",
                    (owner_id, current),
                ).fetchall()
                note_ids.extend(row["id"] for row in note_rows)
                folder_rows = conn.execute(
                    "SELECT id FROM folders WHERE owner_id = ? AND parent_id IS ? ORDER BY rowid",
                    (owner_id, current),
                ).fetchall()
                pending.extend(row["id"] for row in folder_rows)
            return note_ids
        finally:
            conn.close()

    def get_flashcards_for_folder(self, owner_id: str, folder_id: Optional[str]) -> List[Flashcard]:
        return self.get_flashcards_for_notes(self.get_note_ids_in_folder(owner_id, folder_id))

    def count_flashcards_for_note(self, note_id: str) -> int:
        conn = self._db.connect()
        try:
            row = conn.execute(
                """
                SELECT COUNT(*) AS count FROM cards c
                JOIN note_deck_links l ON l.deck_id = c.deck_id
                WHERE l.note_id = ?
                """,
                (note_id,),
            ).fetchone()
        finally:
            conn.close()
        return int(row["count"])

    def update_flashcard(self, card_id: str, update: FlashcardUpdate) -> Flashcard:
        changes = update.model_dump(exclude_none=True)
        if "options" in changes:
            changes["options"] = json.dumps(changes["options"], ensure_ascii=False)
        if "correct_answers" in changes:
            changes["correct_answers"] = json.dumps(
                [answer.strip().lower() for answer in update.correct_answers or []]
            )

        conn = self._db.connect()
        try:
            with conn:
                if changes:
                    assignments = ", ".join(f"{column} = ?" for column in changes)
                    conn.execute(
                        f"UPDATE cards SET {assignments} WHERE id = ?",
                        (*changes.values(), card_id),
                    )
                row = conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
        finally:
            conn.close()

        if row is None:
            raise FlashcardError(
                "card_not_found", f"Flashcard '{card_id}' does not exist", status_code=404
            )
        return _row_to_card(row)

    def delete_flashcards(self, card_ids: Iterable[str]) -> int:
        ids = list(card_ids)
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        conn = self._db.connect()
        try:
            with conn:
                cursor = conn.execute(f"DELETE FROM cards WHERE id IN ({placeholders})", ids)
            return cursor.rowcount
        finally:
            conn.close()

    def _insert_cards(self, deck_id: str, rows: Sequence[tuple]) -> List[Flashcard]:
        conn = self._db.connect()
        card_ids: List[str] = []
        try:
            with conn:
                for card_type, front, back, question, options, correct in rows:
                    card_id = uuid.uuid4().hex
                    conn.execute(
                        """
                        INSERT INTO cards (
                            id, deck_id, type, front, back,
                            question, options, correct_answers, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (card_id, deck_id, card_type, front, back, question, options, correct, _utcnow_iso()),
                    )
                    card_ids.append(card_id)
            placeholders = ", ".join("?" for _ in card_ids)
            stored = conn.execute(
                f"SELECT * FROM cards WHERE id IN ({placeholders}) ORDER BY rowid", card_ids
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_card(row) for row in stored]

    @staticmethod
    def _row_to_deck(row: sqlite3.Row) -> Deck:
        return Deck(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            is_public=bool(row["is_public"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


__all__ = ["FlashcardService", "format_correct_answers", "DECK_NAME_PREFIX"]
