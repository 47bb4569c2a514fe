"""HTTP API routes for note flashcards and exam scoring."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from ..dependencies import get_flashcard_service, get_note_service, get_quiz_parser
from ..middleware import get_owner_id
from ...models.flashcard import ExamFlashcard, ExamRequest, ExamResult, Flashcard
from ...models.quiz import QuizError
from ...services.errors import NoteGraphError
from ...services.flashcards import FlashcardService
from ...services.notes import NoteService
from ...services.quiz_parser import QuizTextParser, parse_bulk_flashcards
from ...services.study import calculate_exam_result, linear_pass, select_random_flashcards

logger = logging.getLogger(__name__)

router = APIRouter(tags=["flashcards"])


class QuizImportRequest(BaseModel):
    """Quiz text to turn into multiple-choice cards."""

    text: str = Field(..., max_length=1_048_576)
    allow_partial: bool = Field(
        False, description="Import the valid blocks even when some blocks fail"
    )


class QuizImportResponse(BaseModel):
    flashcards: List[Flashcard]
    errors: List[QuizError] = Field(default_factory=list)


class ExamStartRequest(BaseModel):
    """Cards to draw for a study session."""

    note_ids: List[str] = Field(default_factory=list)
    folder_id: Optional[str] = None
    count: Optional[int] = Field(None, ge=1, description="Random sample size; all cards in order when omitted")


@router.post(
    "/api/notes/{note_id}/flashcards/quiz",
    response_model=QuizImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_quiz(
    note_id: str,
    request: QuizImportRequest,
    owner_id: str = Depends(get_owner_id),
    notes: NoteService = Depends(get_note_service),
    parser: QuizTextParser = Depends(get_quiz_parser),
    cards: FlashcardService = Depends(get_flashcard_service),
):
    """Parse quiz text and store the questions in the note's deck."""
    note = await notes.get_note(note_id)
    result = parser.parse(request.text)
    if not result.questions or (result.errors and not request.allow_partial):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_quiz",
                "message": "Quiz text has errors",
                "detail": {"errors": [error.model_dump() for error in result.errors]},
            },
        )

    try:
        stored = cards.import_quiz_questions(owner_id, note.id, note.title, result.questions)
    except NoteGraphError:
        raise
    except Exception as e:
        logger.error(f"Failed to import quiz: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to import quiz: {str(e)}",
        )
    return QuizImportResponse(flashcards=stored, errors=result.errors)


@router.post(
    "/api/notes/{note_id}/flashcards/bulk",
    response_model=List[Flashcard],
    status_code=status.HTTP_201_CREATED,
)
async def import_bulk(
    note_id: str,
    request: QuizImportRequest,
    owner_id: str = Depends(get_owner_id),
    notes: NoteService = Depends(get_note_service),
    parser: QuizTextParser = Depends(get_quiz_parser),
    cards: FlashcardService = Depends(get_flashcard_service),
):
    """Store numbered question/answer pairs as front/back cards."""
    note = await notes.get_note(note_id)
    parsed = parse_bulk_flashcards(request.text, parser.question_labels, parser.answer_labels)
    return cards.add_cards(owner_id, note.id, note.title, parsed)


@router.get("/api/notes/{note_id}/flashcards", response_model=List[Flashcard])
async def list_note_flashcards(
    note_id: str,
    notes: NoteService = Depends(get_note_service),
    cards: FlashcardService = Depends(get_flashcard_service),
):
    await notes.get_note(note_id)
    return cards.get_flashcards_for_note(note_id)


@router.get("/api/folders/flashcards", response_model=List[Flashcard])
async def list_folder_flashcards(
    folder_id: Optional[str] = Query(None, description="Folder id; root when omitted"),
    owner_id: str = Depends(get_owner_id),
    cards: FlashcardService = Depends(get_flashcard_service),
):
    """Cards from every note in the folder and its subfolders."""
    return cards.get_flashcards_for_folder(owner_id, folder_id)


@router.post("/api/study/exam/start", response_model=List[ExamFlashcard])
async def start_exam(
    request: ExamStartRequest,
    owner_id: str = Depends(get_owner_id),
    cards: FlashcardService = Depends(get_flashcard_service),
):
    """Draw cards for a session from notes or a folder tree."""
    if request.note_ids:
        pool = cards.get_flashcards_for_notes(request.note_ids)
    else:
        pool = cards.get_flashcards_for_folder(owner_id, request.folder_id)
    if request.count is None:
        return linear_pass(pool)
    return select_random_flashcards(pool, request.count)


@router.post("/api/study/exam", response_model=ExamResult)
async def score_exam(request: ExamRequest):
    """Grade the submitted answers."""
    return calculate_exam_result(request.flashcards, request.time_used, request.time_limit)


__all__ = ["router"]
