"""HTTP API routes for parsing pasted quiz text."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..dependencies import get_quiz_parser
from ...models.quiz import BulkCard, QuizError, QuizParseResult, QuizTextRequest
from ...services.quiz_parser import QuizTextParser, example_quiz_text, parse_bulk_flashcards

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


class ValidationResponse(BaseModel):
    """Outcome of a dry-run parse."""

    valid: bool
    question_count: int
    errors: List[QuizError]


class ExampleResponse(BaseModel):
    text: str


@router.post("/parse", response_model=QuizParseResult)
async def parse(request: QuizTextRequest, parser: QuizTextParser = Depends(get_quiz_parser)):
    """Parse every block; failed blocks are reported alongside the valid ones."""
    return parser.parse(request.text)


@router.post("/validate", response_model=ValidationResponse)
async def validate(request: QuizTextRequest, parser: QuizTextParser = Depends(get_quiz_parser)):
    result = parser.parse(request.text)
    return ValidationResponse(
        valid=result.ok, question_count=len(result.questions), errors=result.errors
    )


@router.get("/example", response_model=ExampleResponse)
async def example():
    return ExampleResponse(text=example_quiz_text())


@router.post("/bulk", response_model=List[BulkCard])
async def parse_bulk(request: QuizTextRequest, parser: QuizTextParser = Depends(get_quiz_parser)):
    """Front/back cards from numbered question/answer pairs."""
    return parse_bulk_flashcards(request.text, parser.question_labels, parser.answer_labels)


__all__ = ["router"]
