"""Service layer for note linking, quiz parsing and flashcards."""

from .backlinks import BacklinkSynchronizer, dedupe_links
from .config import AppConfig, get_config, reload_config
from .database import DatabaseService, init_database
from .errors import (
    FlashcardError,
    FolderNotFoundError,
    NoteGraphError,
    NoteNotFoundError,
    PartialSyncError,
    ResolutionMissError,
)
from .flashcards import FlashcardService
from .folders import FolderService
from .notes import NoteService, SaveResult
from .quiz_parser import (
    QuizTextParser,
    example_quiz_text,
    parse_bulk_flashcards,
    parse_quiz_text,
    validate_quiz_format,
)
from .resolver import NoteResolver, ResolutionPass, ResolveOptions
from .store import NoteStore, SQLiteNoteStore
from .wikilinks import extract_references, iter_references, suggest_wikilinks

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "init_database",
    "NoteGraphError",
    "NoteNotFoundError",
    "PartialSyncError",
    "ResolutionMissError",
    "FlashcardError",
    "NoteStore",
    "SQLiteNoteStore",
    "extract_references",
    "iter_references",
    "suggest_wikilinks",
    "NoteResolver",
    "ResolveOptions",
    "ResolutionPass",
    "BacklinkSynchronizer",
    "dedupe_links",
    "NoteService",
    "SaveResult",
    "QuizTextParser",
    "parse_quiz_text",
    "validate_quiz_format",
    "parse_bulk_flashcards",
    "example_quiz_text",
    "FlashcardService",
    "FolderNotFoundError",
    "FolderService",
]
