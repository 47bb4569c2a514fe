"""Domain errors raised by the note, link and flashcard services."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import status


class NoteGraphError(Exception):
    """Base error carrying an API error code and optional detail payload."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        error: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail or {}


class NoteNotFoundError(NoteGraphError):
    """Raised when a note id does not exist in the store."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, note_id: str) -> None:
        super().__init__(
            "note_not_found",
            f"Note '{note_id}' does not exist",
            detail={"note_id": note_id},
        )
        self.note_id = note_id


class FolderNotFoundError(NoteGraphError):
    """Raised when a folder id does not exist for the owner."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, folder_id: str) -> None:
        super().__init__(
            "folder_not_found",
            f"Folder '{folder_id}' does not exist",
            detail={"folder_id": folder_id},
        )
        self.folder_id = folder_id


class ResolutionMissError(NoteGraphError):
    """Raised by strict resolution when no note matches and creation is disabled."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, display_text: str) -> None:
        super().__init__(
            "resolution_miss",
            f"No note matches '{display_text}'",
            detail={"display_text": display_text, "action": "create"},
        )
        self.display_text = display_text


class PartialSyncError(NoteGraphError):
    """Edges were deleted but at least one insert failed.

    The note body is unaffected; running the synchronization again rebuilds the
    complete edge set from the current text.
    """

    def __init__(
        self,
        from_note_id: str,
        *,
        inserted: int,
        failed: Sequence[Tuple[str, str]],
        causes: Sequence[BaseException] = (),
    ) -> None:
        failed_list: List[Tuple[str, str]] = list(failed)
        super().__init__(
            "partial_sync",
            f"Backlink sync for '{from_note_id}' inserted {inserted} edge(s); "
            f"{len(failed_list)} failed",
            detail={
                "from_note_id": from_note_id,
                "inserted": inserted,
                "failed": [
                    {"to_note_id": to_note_id, "anchor_text": anchor}
                    for to_note_id, anchor in failed_list
                ],
            },
        )
        self.from_note_id = from_note_id
        self.inserted = inserted
        self.failed = failed_list
        self.causes = list(causes)


class FlashcardError(NoteGraphError):
    """Raised when a flashcard or deck operation cannot be completed."""

    status_code = status.HTTP_400_BAD_REQUEST


__all__ = [
    "NoteGraphError",
    "NoteNotFoundError",
    "FolderNotFoundError",
    "ResolutionMissError",
    "PartialSyncError",
    "FlashcardError",
]
