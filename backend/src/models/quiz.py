"""Pydantic models for multiple-choice quiz parsing."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class QuizOption(BaseModel):
    """Single lettered option, e.g. ``b) Paris``."""

    letter: str = Field(..., min_length=1, max_length=1)
    text: str = Field(..., min_length=1)

    @field_validator("letter")
    @classmethod
    def _lower_letter(cls, value: str) -> str:
        if not value.isalpha():
            raise ValueError("Option letter must be alphabetic")
        return value.lower()


class QuizQuestion(BaseModel):
    """Validated multiple-choice question parsed from pasted text."""

    id: str = Field(..., min_length=1, description="Synthetic identifier")
    number: int = Field(..., description="Ordinal as declared in the source text")
    question: str = Field(..., min_length=1, description="Question text, line breaks preserved")
    options: List[QuizOption] = Field(..., min_length=2)
    correct_answers: List[str] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_answers(self) -> "QuizQuestion":
        letters = [option.letter for option in self.options]
        if len(set(letters)) != len(letters):
            raise ValueError("Option letters must be unique")
        unknown = [answer for answer in self.correct_answers if answer not in letters]
        if unknown:
            raise ValueError(f"Correct answers not among options: {', '.join(unknown)}")
        return self

    @property
    def option_letters(self) -> List[str]:
        return [option.letter for option in self.options]


class QuizError(BaseModel):
    """Parse error; ``block_index`` is 1-based and null for input-level errors."""

    block_index: Optional[int] = Field(None, ge=1)
    message: str

    def __str__(self) -> str:
        if self.block_index is None:
            return self.message
        return f"Error in block {self.block_index}: {self.message}"


class QuizParseResult(BaseModel):
    """Questions that validated, plus one error per failed block."""

    questions: List[QuizQuestion] = Field(default_factory=list)
    errors: List[QuizError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.questions) and not self.errors


class BulkCard(BaseModel):
    """Front/back pair parsed from ``Pregunta N:`` / ``Respuesta N:`` text."""

    front: str = Field(..., min_length=1)
    back: str = Field(..., min_length=1)


class QuizTextRequest(BaseModel):
    """Request payload carrying raw pasted quiz text."""

    text: str = Field(..., max_length=1_048_576)


__all__ = [
    "QuizOption",
    "QuizQuestion",
    "QuizError",
    "QuizParseResult",
    "BulkCard",
    "QuizTextRequest",
]
