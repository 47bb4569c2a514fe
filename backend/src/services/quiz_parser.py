"""Parse pasted multiple-choice quiz text into validated questions.

Accepted layout (labels are configurable; Spanish and English by default)::

    Pregunta 1: ¿Cuál es la capital de Francia?
    a) Madrid
    b) París
    Respuesta: b

Question text may span several lines (code, blank lines) before the first
option. ``Respuesta: a,c`` marks several correct answers. Each block is
validated on its own, so one malformed block never hides the others.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import uuid

from ..models.quiz import BulkCard, QuizError, QuizOption, QuizParseResult, QuizQuestion
from .config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_LABELS: Tuple[str, ...] = ("Pregunta", "Question")
DEFAULT_ANSWER_LABELS: Tuple[str, ...] = ("Respuesta", "Answer")
OPTION_PATTERN = re.compile(r"^([A-Za-z])\)\s*(\S.*)$")
MIN_OPTIONS = 2

EMPTY_INPUT_MESSAGE = "Input text is empty"
NO_BLOCKS_MESSAGE = "No questions found"

IdFactory = Callable[[int], str]


class BlockValidationError(ValueError):
    """A single quiz block failed validation."""


class ParserState(enum.Enum):
    """Where the cursor is within the current block."""

    SEEK_QUESTION = "seek_question"
    IN_QUESTION_BODY = "in_question_body"
    IN_OPTIONS = "in_options"


class LineCursor:
    """Single-pass cursor over normalized lines."""

    def __init__(self, lines: Sequence[str]) -> None:
        self.lines = lines
        self.index = 0

    def peek(self) -> Optional[str]:
        if self.index >= len(self.lines):
            return None
        return self.lines[self.index]

    def advance(self) -> str:
        line = self.lines[self.index]
        self.index += 1
        return line


@dataclass
class _Block:
    index: int
    number: int
    question_lines: List[str] = field(default_factory=list)
    options: List[Tuple[str, str]] = field(default_factory=list)
    answer: Optional[str] = None


def _label_group(labels: Sequence[str]) -> str:
    cleaned = [label.strip() for label in labels if label and label.strip()]
    if not cleaned:
        raise ValueError("At least one label is required")
    return "|".join(re.escape(label) for label in cleaned)


def _default_id(block_index: int) -> str:
    return f"mc_{uuid.uuid4().hex[:12]}_{block_index}"


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


class QuizTextParser:
    """Line-oriented state machine producing ``QuizQuestion`` records."""

    def __init__(
        self,
        question_labels: Sequence[str] = DEFAULT_QUESTION_LABELS,
        answer_labels: Sequence[str] = DEFAULT_ANSWER_LABELS,
        *,
        id_factory: IdFactory = _default_id,
    ) -> None:
        self.question_labels = tuple(question_labels)
        self.answer_labels = tuple(answer_labels)
        self.header_pattern = re.compile(
            rf"^(?:{_label_group(question_labels)})\s+(\d+):\s*(.*)$", re.IGNORECASE
        )
        self.answer_pattern = re.compile(
            rf"^(?:{_label_group(answer_labels)}):(.*)$", re.IGNORECASE
        )
        self.id_factory = id_factory
        self._handlers: Dict[ParserState, Callable[[_Block, str, str], ParserState]] = {
            ParserState.IN_QUESTION_BODY: self._in_question_body,
            ParserState.IN_OPTIONS: self._in_options,
        }

    @classmethod
    def from_config(cls, config: AppConfig) -> "QuizTextParser":
        return cls(config.quiz_question_labels, config.quiz_answer_labels)

    def parse(self, text: str) -> QuizParseResult:
        if not isinstance(text, str):
            raise TypeError(f"Quiz text must be str, not {type(text).__name__}")

        result = QuizParseResult()
        if not text.strip():
            result.errors.append(QuizError(message=EMPTY_INPUT_MESSAGE))
            return result

        blocks = self.split_blocks(text)
        if not blocks:
            result.errors.append(QuizError(message=NO_BLOCKS_MESSAGE))
            return result

        for block in blocks:
            try:
                result.questions.append(self._build_question(block))
            except BlockValidationError as exc:
                result.errors.append(QuizError(block_index=block.index, message=str(exc)))

        logger.debug(
            "Quiz text parsed",
            extra={
                "blocks": len(blocks),
                "questions": len(result.questions),
                "errors": len(result.errors),
            },
        )
        return result

    def split_blocks(self, text: str) -> List[_Block]:
        """Run the state machine and return the raw (unvalidated) blocks."""
        cursor = LineCursor(normalize_newlines(text).split("\n"))
        blocks: List[_Block] = []
        block: Optional[_Block] = None
        state = ParserState.SEEK_QUESTION

        while cursor.peek() is not None:
            line = cursor.advance()
            stripped = line.strip()

            header = self.header_pattern.match(stripped)
            if header:
                block = _Block(index=len(blocks) + 1, number=int(header.group(1)))
                blocks.append(block)
                first_line = header.group(2).strip()
                if first_line:
                    block.question_lines.append(first_line)
                state = ParserState.IN_QUESTION_BODY
                continue

            if state is ParserState.SEEK_QUESTION or block is None:
                continue
            state = self._handlers[state](block, line, stripped)

        return blocks

    def _in_question_body(self, block: _Block, line: str, stripped: str) -> ParserState:
        if self._take_answer(block, stripped):
            return ParserState.SEEK_QUESTION
        if self._take_option(block, stripped):
            return ParserState.IN_OPTIONS
        # Leading blank lines are dropped; everything after is kept verbatim.
        if stripped or block.question_lines:
            block.question_lines.append(line)
        return ParserState.IN_QUESTION_BODY

    def _in_options(self, block: _Block, line: str, stripped: str) -> ParserState:
        if self._take_answer(block, stripped):
            return ParserState.SEEK_QUESTION
        # Wrapped option text and other stray lines are skipped until the answer.
        self._take_option(block, stripped)
        return ParserState.IN_OPTIONS

    def _take_answer(self, block: _Block, stripped: str) -> bool:
        match = self.answer_pattern.match(stripped)
        if not match:
            return False
        block.answer = match.group(1)
        return True

    @staticmethod
    def _take_option(block: _Block, stripped: str) -> bool:
        match = OPTION_PATTERN.match(stripped)
        if not match:
            return False
        block.options.append((match.group(1).lower(), match.group(2).strip()))
        return True

    def _build_question(self, block: _Block) -> QuizQuestion:
        question_text = "\n".join(block.question_lines).strip()
        if not question_text:
            raise BlockValidationError("Question text is empty")

        if len(block.options) < MIN_OPTIONS:
            raise BlockValidationError(f"At least {MIN_OPTIONS} options are required")

        letters = [letter for letter, _ in block.options]
        duplicates = sorted({letter for letter in letters if letters.count(letter) > 1})
        if duplicates:
            raise BlockValidationError(f"Duplicate option letters: {', '.join(duplicates)}")

        if block.answer is None:
            raise BlockValidationError("Missing answer line")

        answers: List[str] = []
        for token in block.answer.split(","):
            cleaned = token.strip().lower()
            if cleaned and cleaned not in answers:
                answers.append(cleaned)
        if not answers:
            raise BlockValidationError("No correct answers specified")

        invalid = [answer for answer in answers if answer not in letters]
        if invalid:
            raise BlockValidationError(f"Invalid answers: {', '.join(invalid)}")

        return QuizQuestion(
            id=self.id_factory(block.index),
            number=block.number,
            question=question_text,
            options=[QuizOption(letter=letter, text=text) for letter, text in block.options],
            correct_answers=answers,
        )


_default_parser = QuizTextParser()


def parse_quiz_text(text: str, parser: QuizTextParser | None = None) -> QuizParseResult:
    """Parse quiz text with the default (Spanish + English) labels."""
    return (parser or _default_parser).parse(text)


def validate_quiz_format(
    text: str, parser: QuizTextParser | None = None
) -> Tuple[bool, List[QuizError]]:
    """Valid when at least one question parsed and no block failed."""
    result = parse_quiz_text(text, parser)
    return result.ok, result.errors


def parse_bulk_flashcards(
    text: str,
    question_labels: Sequence[str] = DEFAULT_QUESTION_LABELS,
    answer_labels: Sequence[str] = DEFAULT_ANSWER_LABELS,
) -> List[BulkCard]:
    """Pair ``Pregunta N: ...`` lines with the next ``Respuesta N: ...`` line.

    A question with no answer before the next question header is skipped.
    """
    if not isinstance(text, str):
        raise TypeError(f"Flashcard text must be str, not {type(text).__name__}")

    question_pattern = re.compile(
        rf"^(?:{_label_group(question_labels)})\s+\d+:\s*(.+)$", re.IGNORECASE
    )
    answer_pattern = re.compile(
        rf"^(?:{_label_group(answer_labels)})\s+\d+:\s*(.+)$", re.IGNORECASE
    )
    lines = [line.strip() for line in normalize_newlines(text).split("\n")]
    cards: List[BulkCard] = []

    index = 0
    while index < len(lines):
        question_match = question_pattern.match(lines[index])
        if not question_match:
            index += 1
            continue
        front = question_match.group(1).strip()
        for offset in range(index + 1, len(lines)):
            if question_pattern.match(lines[offset]):
                index = offset
                break
            answer_match = answer_pattern.match(lines[offset])
            if answer_match:
                back = answer_match.group(1).strip()
                if front and back:
                    cards.append(BulkCard(front=front, back=back))
                index = offset + 1
                break
        else:
            index += 1

    return cards


def example_quiz_text() -> str:
    """Sample input shown to users."""
    return (
        "Pregunta 1: ¿Cuál es la capital de Francia?\n"
        "a) Madrid\n"
        "b) París\n"
        "c) Roma\n"
        "d) Londres\n"
        "Respuesta: b\n"
        "\n"
        "Pregunta 2: ¿Cuáles son números pares?\n"
        "a) 1\n"
        "b) 2\n"
        "c) 3\n"
        "d) 4\n"
        "e) 5\n"
        "Respuesta: b,d\n"
        "\n"
        "Pregunta 3: ¿Qué lenguajes de programación son orientados a objetos?\n"
        "a) JavaScript\n"
        "b) Python\n"
        "c) HTML\n"
        "d) Java\n"
        "Respuesta: a,b,d"
    )


__all__ = [
    "ParserState",
    "LineCursor",
    "QuizTextParser",
    "BlockValidationError",
    "parse_quiz_text",
    "validate_quiz_format",
    "parse_bulk_flashcards",
    "example_quiz_text",
    "EMPTY_INPUT_MESSAGE",
    "NO_BLOCKS_MESSAGE",
]
