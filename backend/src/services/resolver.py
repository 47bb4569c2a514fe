"""Resolve wikilink display text to concrete notes."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, List

from ..models.links import Resolution
from ..models.note import NoteRef
from .config import AppConfig, get_config
from .errors import ResolutionMissError
from .store import NoteStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveOptions:
    """Policy for a resolution miss.

    The save path allows creation; read-only flows (previews, backlink
    panels) leave it off and report the miss instead.
    """

    create_if_missing: bool = False


class NoteResolver:
    """Map display text to a note id: exact title, then substring, then miss.

    Ties in either lookup go to the first note in the store's default order.
    The substring step is a heuristic and can pick a different note than the
    author intended when several titles contain the text.
    """

    def __init__(self, store: NoteStore, config: AppConfig | None = None) -> None:
        self.store = store
        self.config = config or get_config()

    async def resolve(
        self,
        owner_id: str,
        display_text: str,
        options: ResolveOptions = ResolveOptions(),
    ) -> Resolution:
        text = display_text.strip() if isinstance(display_text, str) else ""
        if not text:
            raise ValueError("Display text must be a non-empty string")

        exact = await self.store.find_exact(owner_id, text, limit=1)
        if exact:
            return self._hit(text, exact[0], "exact")

        similar = await self.store.find_contains(owner_id, text, limit=1)
        if similar:
            return self._hit(text, similar[0], "contains")

        if not options.create_if_missing:
            logger.debug(
                "Wikilink unresolved", extra={"owner_id": owner_id, "display_text": text}
            )
            return Resolution(display_text=text)

        body = self.config.stub_body_template.format(title=text)
        note = await self.store.create_note(owner_id, text, body, parent_id=None)
        logger.info(
            "Created note from wikilink",
            extra={"owner_id": owner_id, "note_id": note.id, "title": text},
        )
        return Resolution(display_text=text, note_id=note.id, title=note.title, matched_by="created")

    async def require(self, owner_id: str, display_text: str) -> Resolution:
        """Resolve without creating; raise ``ResolutionMissError`` on a miss."""
        resolution = await self.resolve(owner_id, display_text)
        if resolution.is_miss:
            raise ResolutionMissError(resolution.display_text)
        return resolution

    async def search_titles(
        self, owner_id: str, partial: str, *, limit: int = 5
    ) -> List[NoteRef]:
        """Title suggestions for a partially typed wikilink."""
        if not partial.strip():
            return []
        return await self.store.find_contains(owner_id, partial, limit=limit)

    def start_pass(
        self, owner_id: str, options: ResolveOptions = ResolveOptions()
    ) -> "ResolutionPass":
        return ResolutionPass(self, owner_id, options)

    @staticmethod
    def _hit(text: str, ref: NoteRef, kind: str) -> Resolution:
        logger.debug(
            "Wikilink resolved",
            extra={"display_text": text, "note_id": ref.id, "matched_by": kind},
        )
        return Resolution(display_text=text, note_id=ref.id, title=ref.title, matched_by=kind)


class ResolutionPass:
    """Memoizes resolutions for one body so repeated links create one note."""

    def __init__(self, resolver: NoteResolver, owner_id: str, options: ResolveOptions) -> None:
        self.resolver = resolver
        self.owner_id = owner_id
        self.options = options
        self._cache: Dict[str, Resolution] = {}

    async def resolve(self, display_text: str) -> Resolution:
        key = display_text.strip().casefold()
        cached = self._cache.get(key)
        if cached is not None:
            if cached.display_text == display_text.strip():
                return cached
            return cached.model_copy(update={"display_text": display_text.strip()})

        resolution = await self.resolver.resolve(self.owner_id, display_text, self.options)
        self._cache[key] = resolution
        return resolution

    @property
    def created(self) -> List[NoteRef]:
        return [
            NoteRef(id=item.note_id, title=item.title or item.display_text)
            for item in self._cache.values()
            if item.created and item.note_id
        ]

    @property
    def misses(self) -> List[str]:
        return [item.display_text for item in self._cache.values() if item.is_miss]


__all__ = ["NoteResolver", "ResolveOptions", "ResolutionPass"]
