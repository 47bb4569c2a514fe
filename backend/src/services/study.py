"""Study passes and exam scoring over stored flashcards.

Study here is a plain linear or shuffled pass; there is no scheduling.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Union

from ..models.flashcard import ExamFlashcard, ExamResult, Flashcard

Answer = Union[str, List[str]]


def _numbered(card: Flashcard, index: int) -> ExamFlashcard:
    return ExamFlashcard(**{**card.model_dump(), "exam_index": index})


def linear_pass(cards: Sequence[Flashcard]) -> List[ExamFlashcard]:
    """Cards in stored order, numbered for the session."""
    return [_numbered(card, index) for index, card in enumerate(cards)]


def select_random_flashcards(
    cards: Sequence[Flashcard],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[ExamFlashcard]:
    """Shuffle (Fisher-Yates) and take ``count`` cards; the input is not modified."""
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return [
        _numbered(card, index)
        for index, card in enumerate(shuffled[: max(count, 0)])
    ]


def check_answer(card: Flashcard, answer: Answer) -> bool:
    """Multiple choice: same letter set. Traditional: self-graded ``"correct"``."""
    if card.type == "multiple_choice":
        given = answer if isinstance(answer, list) else [answer]
        normalized = sorted(item.strip().lower() for item in given)
        return normalized == sorted(card.correct_answers)
    return answer == "correct"


def calculate_exam_result(
    cards: Sequence[ExamFlashcard], time_used: int, time_limit: int
) -> ExamResult:
    """Re-grade every answered card and aggregate the score."""
    graded: List[ExamFlashcard] = []
    for card in cards:
        if card.user_answer is not None:
            card = card.model_copy(update={"is_correct": check_answer(card, card.user_answer)})
        graded.append(card)

    total = len(graded)
    answered = sum(1 for card in graded if card.user_answer is not None)
    correct = sum(1 for card in graded if card.is_correct is True)
    incorrect = sum(
        1 for card in graded if card.user_answer is not None and card.is_correct is False
    )
    score = int(correct * 100 / total + 0.5) if total else 0

    return ExamResult(
        total_questions=total,
        answered_questions=answered,
        correct_answers=correct,
        incorrect_answers=incorrect,
        unanswered_questions=total - answered,
        time_used=time_used,
        time_limit=time_limit,
        score=score,
        flashcards=graded,
    )


def format_time(seconds: int) -> str:
    """``mm:ss`` clock display."""
    minutes, remaining = divmod(max(int(seconds), 0), 60)
    return f"{minutes:02d}:{remaining:02d}"


__all__ = [
    "linear_pass",
    "select_random_flashcards",
    "check_answer",
    "calculate_exam_result",
    "format_time",
]
