"""Flashcard, deck and exam models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .quiz import QuizOption

CardType = Literal["traditional", "multiple_choice"]


class Deck(BaseModel):
    """Deck of cards attached to a note."""

    id: str
    owner_id: str
    name: str = Field(..., min_length=1)
    is_public: bool = False
    created_at: datetime


class Flashcard(BaseModel):
    """Stored card, either front/back or multiple choice."""

    id: str
    deck_id: str
    type: CardType = "traditional"
    front: str = ""
    back: str = ""
    question: Optional[str] = None
    options: List[QuizOption] = Field(default_factory=list)
    correct_answers: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class FlashcardUpdate(BaseModel):
    """Partial update for a stored card."""

    front: Optional[str] = None
    back: Optional[str] = None
    question: Optional[str] = None
    options: Optional[List[QuizOption]] = None
    correct_answers: Optional[List[str]] = None


class ExamFlashcard(Flashcard):
    """Card drawn into an exam, with the user's answer."""

    exam_index: int = Field(..., ge=0)
    user_answer: Optional[Union[str, List[str]]] = None
    is_correct: Optional[bool] = None
    time_spent: Optional[float] = None


class ExamResult(BaseModel):
    """Aggregate exam outcome."""

    total_questions: int = Field(..., ge=0)
    answered_questions: int = Field(..., ge=0)
    correct_answers: int = Field(..., ge=0)
    incorrect_answers: int = Field(..., ge=0)
    unanswered_questions: int = Field(..., ge=0)
    time_used: int = Field(..., ge=0)
    time_limit: int = Field(..., ge=0)
    score: int = Field(..., ge=0, le=100, description="Percentage of correct answers")
    flashcards: List[ExamFlashcard] = Field(default_factory=list)


class ExamRequest(BaseModel):
    """Answered exam submitted for scoring."""

    flashcards: List[ExamFlashcard]
    time_used: int = Field(0, ge=0)
    time_limit: int = Field(0, ge=0)


__all__ = [
    "CardType",
    "Deck",
    "Flashcard",
    "FlashcardUpdate",
    "ExamFlashcard",
    "ExamResult",
    "ExamRequest",
]
