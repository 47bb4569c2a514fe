"""Keep the persisted link graph in step with note bodies."""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.links import Backlink, ResolvedLink, SyncResult
from .config import AppConfig, get_config
from .errors import PartialSyncError
from .resolver import NoteResolver, ResolutionPass, ResolveOptions
from .store import NoteStore
from .wikilinks import iter_references

logger = logging.getLogger(__name__)


def dedupe_links(links: Iterable[ResolvedLink]) -> List[ResolvedLink]:
    """Distinct ``(to_note_id, anchor_text)`` pairs in first-occurrence order."""
    seen: Dict[Tuple[str, str], ResolvedLink] = {}
    for link in links:
        seen.setdefault((link.to_note_id, link.anchor_text), link)
    return list(seen.values())


class BacklinkSynchronizer:
    """Rebuild a note's outgoing edges from its current body.

    The rebuild deletes every outgoing edge and inserts the fresh set. It is
    not transactional: if an insert fails the edge set is left short and a
    ``PartialSyncError`` is raised. Re-running the synchronization is always
    safe because the expected set is recomputed from the body alone.

    Callers must serialize synchronizations of the same note. Different
    notes never touch each other's edges.
    """

    def __init__(
        self,
        store: NoteStore,
        resolver: NoteResolver | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or get_config()
        self.resolver = resolver or NoteResolver(store, self.config)

    async def resolve_links(
        self, owner_id: str, body: str, options: ResolveOptions
    ) -> Tuple[List[ResolvedLink], ResolutionPass]:
        """Resolve every reference in ``body``; misses are dropped."""
        resolution_pass = self.resolver.start_pass(owner_id, options)
        links: List[ResolvedLink] = []
        for reference in iter_references(body):
            resolution = await resolution_pass.resolve(reference.text)
            if resolution.note_id is None:
                continue
            links.append(ResolvedLink(anchor_text=reference.text, to_note_id=resolution.note_id))
        return links, resolution_pass

    async def synchronize_backlinks(
        self,
        owner_id: str,
        from_note_id: str,
        body: str,
        *,
        create_if_missing: Optional[bool] = None,
    ) -> SyncResult:
        """Make the edges of ``from_note_id`` match the references in ``body``."""
        start_time = time.time()
        if create_if_missing is None:
            create_if_missing = self.config.auto_create_on_miss

        if await self.store.get_note(from_note_id) is None:
            logger.info(
                "Skipping backlink sync for missing note",
                extra={"owner_id": owner_id, "from_note_id": from_note_id},
            )
            return SyncResult(from_note_id=from_note_id, skipped=True)

        links, resolution_pass = await self.resolve_links(
            owner_id, body, ResolveOptions(create_if_missing=create_if_missing)
        )
        if resolution_pass.misses:
            logger.warning(
                "Unresolved wikilinks left without edges",
                extra={
                    "owner_id": owner_id,
                    "from_note_id": from_note_id,
                    "misses": len(resolution_pass.misses),
                },
            )
        removed, inserted = await self._replace_edges(owner_id, from_note_id, links)

        result = SyncResult(
            from_note_id=from_note_id,
            removed=removed,
            inserted=inserted,
            created_notes=resolution_pass.created,
            misses=resolution_pass.misses,
        )
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Backlinks synchronized",
            extra={
                "owner_id": owner_id,
                "from_note_id": from_note_id,
                "removed": removed,
                "inserted": inserted,
                "created_notes": len(result.created_notes),
                "misses": len(result.misses),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )
        return result

    async def apply(
        self, owner_id: str, from_note_id: str, links: Sequence[ResolvedLink]
    ) -> SyncResult:
        """Replace the edges of ``from_note_id`` with an already-resolved list."""
        if await self.store.get_note(from_note_id) is None:
            return SyncResult(from_note_id=from_note_id, skipped=True)

        removed, inserted = await self._replace_edges(owner_id, from_note_id, links)
        return SyncResult(from_note_id=from_note_id, removed=removed, inserted=inserted)

    async def outgoing(self, from_note_id: str) -> List[Backlink]:
        return await self.store.list_outgoing_edges(from_note_id)

    async def backlinks(self, to_note_id: str) -> List[Backlink]:
        return await self.store.list_backlinks(to_note_id)

    async def _replace_edges(
        self, owner_id: str, from_note_id: str, links: Sequence[ResolvedLink]
    ) -> Tuple[int, int]:
        expected = dedupe_links(links)
        removed = await self.store.delete_edges(from_note_id)

        inserted = 0
        failed: List[Tuple[str, str]] = []
        causes: List[BaseException] = []
        for link in expected:
            try:
                await self.store.insert_edge(
                    owner_id, from_note_id, link.to_note_id, link.anchor_text
                )
            except Exception as exc:
                failed.append((link.to_note_id, link.anchor_text))
                causes.append(exc)
                continue
            inserted += 1

        if failed:
            logger.warning(
                "Backlink sync left edges missing",
                extra={
                    "owner_id": owner_id,
                    "from_note_id": from_note_id,
                    "inserted": inserted,
                    "failed": len(failed),
                },
            )
            raise PartialSyncError(
                from_note_id, inserted=inserted, failed=failed, causes=causes
            ) from causes[0]

        return removed, inserted


__all__ = ["BacklinkSynchronizer", "dedupe_links"]
