import pytest
from pydantic import ValidationError

from backend.src.models.links import Backlink, Reference, Resolution
from backend.src.models.note import NoteCreate, NoteUpdate
from backend.src.models.quiz import QuizError, QuizOption, QuizQuestion


def _options(*letters: str):
    return [QuizOption(letter=letter, text=f"option {letter}") for letter in letters]


def test_quiz_question_rejects_answer_outside_options() -> None:
    with pytest.raises(ValidationError):
        QuizQuestion(
            id="q", number=1, question="Q", options=_options("a", "b"), correct_answers=["c"]
        )


def test_quiz_question_rejects_duplicate_letters() -> None:
    with pytest.raises(ValidationError):
        QuizQuestion(
            id="q", number=1, question="Q", options=_options("a", "a"), correct_answers=["a"]
        )


def test_quiz_question_requires_two_options_and_an_answer() -> None:
    with pytest.raises(ValidationError):
        QuizQuestion(id="q", number=1, question="Q", options=_options("a"), correct_answers=["a"])
    with pytest.raises(ValidationError):
        QuizQuestion(id="q", number=1, question="Q", options=_options("a", "b"), correct_answers=[])


def test_option_letter_is_lowercased() -> None:
    assert QuizOption(letter="C", text="x").letter == "c"
    with pytest.raises(ValidationError):
        QuizOption(letter="1", text="x")


def test_quiz_error_str() -> None:
    assert str(QuizError(message="No questions found")) == "No questions found"
    assert str(QuizError(block_index=2, message="Missing answer line")) == (
        "Error in block 2: Missing answer line"
    )


def test_reference_span_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Reference(text="A", start=5, end=5)


def test_backlink_key() -> None:
    edge = Backlink(from_note_id="a", to_note_id="b", anchor_text="B")

    assert edge.key == ("b", "B")


def test_resolution_flags() -> None:
    assert Resolution(display_text="x").is_miss
    assert Resolution(display_text="x", note_id="1", matched_by="created").created


def test_note_payload_titles_are_stripped() -> None:
    assert NoteCreate(title="  Hello ").title == "Hello"
    assert NoteUpdate(body="b").title is None
    with pytest.raises(ValidationError):
        NoteUpdate(title=" ", body="b")
