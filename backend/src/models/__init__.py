"""Pydantic models for data validation and serialization."""

from .flashcard import (
    Deck,
    ExamFlashcard,
    ExamRequest,
    ExamResult,
    Flashcard,
    FlashcardUpdate,
)
from .links import (
    Backlink,
    Reference,
    Resolution,
    ResolvedLink,
    SyncResult,
    WikilinkSuggestions,
)
from .note import Folder, FolderCreate, Note, NoteCreate, NoteRef, NoteSummary, NoteUpdate
from .quiz import BulkCard, QuizError, QuizOption, QuizParseResult, QuizQuestion

__all__ = [
    "Note",
    "NoteRef",
    "NoteCreate",
    "NoteUpdate",
    "NoteSummary",
    "Folder",
    "FolderCreate",
    "Reference",
    "Backlink",
    "Resolution",
    "ResolvedLink",
    "SyncResult",
    "WikilinkSuggestions",
    "QuizOption",
    "QuizQuestion",
    "QuizError",
    "QuizParseResult",
    "BulkCard",
    "Deck",
    "Flashcard",
    "FlashcardUpdate",
    "ExamFlashcard",
    "ExamResult",
    "ExamRequest",
]
