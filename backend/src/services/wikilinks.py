"""Wikilink scanning for note bodies.

A wikilink is any ``[[display text]]`` span. Scanning is a single
left-to-right, non-overlapping regex pass: brackets are not allowed inside
the display text, so an unmatched ``[[`` never swallows a later link.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..models.links import Reference, WikilinkSuggestions
from ..models.note import NoteRef

WIKILINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\]\]")
OPEN_WIKILINK_PATTERN = re.compile(r"\[\[([^\[\]]*)$")
CLOSE_WIKILINK_PATTERN = re.compile(r"^([^\[\]]*?)\]\]")
MAX_SUGGESTIONS = 5


def _require_text(body: object) -> str:
    if not isinstance(body, str):
        raise TypeError(f"Note body must be str, not {type(body).__name__}")
    return body


def iter_references(body: str) -> Iterator[Reference]:
    """Yield references in source order; whitespace-only links are skipped."""
    for match in WIKILINK_PATTERN.finditer(_require_text(body)):
        text = match.group(1).strip()
        if text:
            yield Reference(text=text, start=match.start(), end=match.end())


class ReferenceScan:
    """Re-iterable view over the references of a body.

    Every iteration rescans the text, so the sequence can be consumed any
    number of times.
    """

    def __init__(self, body: str) -> None:
        self.body = _require_text(body)

    def __iter__(self) -> Iterator[Reference]:
        return iter_references(self.body)

    def __repr__(self) -> str:
        return f"ReferenceScan({len(self.body)} chars)"


def extract_references(body: str) -> List[Reference]:
    """Extract every wikilink from a Markdown body."""
    return list(iter_references(body))


def unique_display_texts(references: Iterable[Reference]) -> List[str]:
    """Distinct display texts in first-occurrence order."""
    seen: dict[str, None] = {}
    for reference in references:
        seen.setdefault(reference.text, None)
    return list(seen)


def find_open_wikilink(text: str, cursor: int) -> Optional[Tuple[str, int, int]]:
    """Locate an unterminated ``[[partial`` ending at ``cursor``.

    Returns ``(partial, start, end)`` where ``start..end`` is the span to
    replace; ``end`` extends to an existing closing ``]]`` after the cursor.
    """
    text = _require_text(text)
    cursor = max(0, min(cursor, len(text)))
    open_match = OPEN_WIKILINK_PATTERN.search(text[:cursor])
    if not open_match:
        return None

    partial = open_match.group(1)
    start = cursor - len(partial)
    close_match = CLOSE_WIKILINK_PATTERN.match(text[cursor:])
    end = cursor + len(close_match.group(1)) if close_match else cursor
    return partial, start, end


def suggest_wikilinks(
    text: str,
    cursor: int,
    candidates: Sequence[NoteRef],
    *,
    limit: int = MAX_SUGGESTIONS,
) -> Optional[WikilinkSuggestions]:
    """Suggest note titles for the wikilink being typed at ``cursor``."""
    located = find_open_wikilink(text, cursor)
    if located is None:
        return None

    partial, start, end = located
    needle = partial.casefold()
    matches = [note for note in candidates if needle in note.title.casefold()]
    return WikilinkSuggestions(
        partial=partial,
        start=start,
        end=end,
        suggestions=matches[:limit],
    )


__all__ = [
    "WIKILINK_PATTERN",
    "ReferenceScan",
    "iter_references",
    "extract_references",
    "unique_display_texts",
    "find_open_wikilink",
    "suggest_wikilinks",
]
