from datetime import datetime, timezone
from pathlib import Path

import pytest

from backend.src.models.flashcard import FlashcardUpdate
from backend.src.models.quiz import BulkCard
from backend.src.services.database import DatabaseService
from backend.src.services.errors import FlashcardError
from backend.src.services.flashcards import FlashcardService, format_correct_answers
from backend.src.services.quiz_parser import parse_quiz_text

OWNER = "alice"

QUIZ = (
    "Pregunta 1: ¿Cuál es la capital de Francia?\n"
    "a) Madrid\nb) París\nc) Roma\n"
    "Respuesta: b\n"
    "\n"
    "Pregunta 2: ¿Cuáles son números pares?\n"
    "a) 1\nb) 2\nc) 3\nd) 4\n"
    "Respuesta: b,d\n"
)


@pytest.fixture()
def service(tmp_path: Path) -> FlashcardService:
    db_service = DatabaseService(tmp_path / "cards.db")
    db_service.initialize()
    return FlashcardService(db_service)


def _insert_note(service: FlashcardService, note_id: str, parent_id=None) -> None:
    now = datetime.now(timezone.utc).isoformat()
    conn = service._db.connect()
    with conn:
        conn.execute(
            "INSERT INTO notes (id, owner_id, title, body, parent_id, created, updated) "
            "VALUES (?, ?, ?, '', ?, ?, ?)",
            (note_id, OWNER, note_id.title(), parent_id, now, now),
        )
    conn.close()


def _insert_folder(service: FlashcardService, folder_id: str, parent_id=None) -> None:
    conn = service._db.connect()
    with conn:
        conn.execute(
            "INSERT INTO folders (id, owner_id, name, parent_id) VALUES (?, ?, ?, ?)",
            (folder_id, OWNER, folder_id, parent_id),
        )
    conn.close()


def test_deck_is_created_once_per_note(service: FlashcardService) -> None:
    deck = service.get_or_create_deck_for_note(OWNER, "n1", "Geografía")
    again = service.get_or_create_deck_for_note(OWNER, "n1", "Renamed")

    assert deck.name == "Flashcards: Geografía"
    assert again.id == deck.id


def test_import_quiz_questions_stores_multiple_choice_cards(service: FlashcardService) -> None:
    questions = parse_quiz_text(QUIZ).questions

    cards = service.import_quiz_questions(OWNER, "n1", "Repaso", questions)

    assert [card.type for card in cards] == ["multiple_choice", "multiple_choice"]
    assert cards[0].front == "¿Cuál es la capital de Francia?"
    assert cards[0].back == "b) París"
    assert cards[1].correct_answers == ["b", "d"]
    assert [option.letter for option in cards[1].options] == ["a", "b", "c", "d"]
    assert service.get_flashcards_for_note("n1") == cards
    assert service.count_flashcards_for_note("n1") == 2


def test_format_correct_answers_lists_each_answer() -> None:
    question = parse_quiz_text(QUIZ).questions[1]

    assert format_correct_answers(question) == "b) 2\nd) 4"


def test_import_without_questions_is_rejected(service: FlashcardService) -> None:
    with pytest.raises(FlashcardError):
        service.import_quiz_questions(OWNER, "n1", "Empty", [])


def test_add_cards_stores_traditional_cards(service: FlashcardService) -> None:
    cards = service.add_cards(
        OWNER, "n1", "Vocab", [BulkCard(front="hola", back="hello"), BulkCard(front="adiós", back="bye")]
    )

    assert [(card.type, card.front, card.back) for card in cards] == [
        ("traditional", "hola", "hello"),
        ("traditional", "adiós", "bye"),
    ]
    assert cards[0].options == []


def test_folder_cards_include_subfolders(service: FlashcardService) -> None:
    _insert_folder(service, "science")
    _insert_folder(service, "physics", parent_id="science")
    _insert_note(service, "top", parent_id="science")
    _insert_note(service, "deep", parent_id="physics")
    _insert_note(service, "elsewhere")
    for note_id in ("top", "deep", "elsewhere"):
        service.add_cards(OWNER, note_id, note_id, [BulkCard(front=note_id, back="x")])

    assert service.get_note_ids_in_folder(OWNER, "science") == ["top", "deep"]
    assert [card.front for card in service.get_flashcards_for_folder(OWNER, "science")] == [
        "top",
        "deep",
    ]
    assert service.get_note_ids_in_folder(OWNER, None) == ["elsewhere", "top", "deep"]


def test_update_flashcard(service: FlashcardService) -> None:
    card = service.add_cards(OWNER, "n1", "T", [BulkCard(front="f", back="b")])[0]

    updated = service.update_flashcard(card.id, FlashcardUpdate(back="better"))

    assert updated.back == "better"
    assert updated.front == "f"


def test_update_missing_flashcard(service: FlashcardService) -> None:
    with pytest.raises(FlashcardError) as excinfo:
        service.update_flashcard("missing", FlashcardUpdate(front="x"))

    assert excinfo.value.status_code == 404


def test_delete_flashcards(service: FlashcardService) -> None:
    cards = service.add_cards(
        OWNER, "n1", "T", [BulkCard(front="a", back="1"), BulkCard(front="b", back="2")]
    )

    assert service.delete_flashcards([cards[0].id]) == 1
    assert [card.front for card in service.get_flashcards_for_note("n1")] == ["b"]
    assert service.delete_flashcards([]) == 0
