"""Service providers for route dependency injection.

Everything hangs off ``get_store`` and ``get_database``, so tests can
override those two and get fully wired services.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from ..services.backlinks import BacklinkSynchronizer
from ..services.config import AppConfig, get_config
from ..services.database import DatabaseService
from ..services.flashcards import FlashcardService
from ..services.folders import FolderService
from ..services.notes import NoteService
from ..services.quiz_parser import QuizTextParser
from ..services.resolver import NoteResolver
from ..services.store import NoteStore, SQLiteNoteStore


def get_database() -> DatabaseService:
    return DatabaseService()


def get_store(db: Annotated[DatabaseService, Depends(get_database)]) -> NoteStore:
    return SQLiteNoteStore(db)


def get_resolver(
    store: Annotated[NoteStore, Depends(get_store)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> NoteResolver:
    return NoteResolver(store, config)


def get_synchronizer(
    store: Annotated[NoteStore, Depends(get_store)],
    resolver: Annotated[NoteResolver, Depends(get_resolver)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> BacklinkSynchronizer:
    return BacklinkSynchronizer(store, resolver, config)


def get_note_service(
    store: Annotated[NoteStore, Depends(get_store)],
    synchronizer: Annotated[BacklinkSynchronizer, Depends(get_synchronizer)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> NoteService:
    return NoteService(store, synchronizer, config)


def get_quiz_parser(config: Annotated[AppConfig, Depends(get_config)]) -> QuizTextParser:
    return QuizTextParser.from_config(config)


def get_flashcard_service(
    db: Annotated[DatabaseService, Depends(get_database)],
) -> FlashcardService:
    return FlashcardService(db)


def get_folder_service(
    db: Annotated[DatabaseService, Depends(get_database)],
) -> FolderService:
    return FolderService(db)


__all__ = [
    "get_database",
    "get_store",
    "get_resolver",
    "get_synchronizer",
    "get_note_service",
    "get_quiz_parser",
    "get_flashcard_service",
    "get_folder_service",
]
