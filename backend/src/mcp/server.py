"""FastMCP server exposing wikilink, backlink and quiz tools."""

from __future__ import annotations

import logging
import os
import time
from typing import Annotated, Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

# Load environment variables from .env file
load_dotenv()

from ..services.backlinks import BacklinkSynchronizer
from ..services.config import get_config
from ..services.database import DatabaseService
from ..services.errors import NoteNotFoundError
from ..services.quiz_parser import QuizTextParser
from ..services.resolver import NoteResolver, ResolveOptions
from ..services.store import SQLiteNoteStore
from ..services.wikilinks import extract_references as scan_references

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "note-graph",
    instructions=(
        "Note graph tools. Wikilinks are [[display text]] spans; brackets are not allowed inside. "
        "Resolution matches an exact title first (case-insensitive), then the first title containing "
        "the text, else it is a miss. Synchronizing a note replaces all of its outgoing edges with "
        "the links in its current body. Quiz text uses 'Pregunta N:'/'Question N:' headers, "
        "'a) option' lines and a 'Respuesta:'/'Answer:' line with comma-separated letters."
    ),
)


def _current_user_id() -> str:
    return get_config().local_user_id


def _synchronizer() -> BacklinkSynchronizer:
    config = get_config()
    store = SQLiteNoteStore(DatabaseService(config.database_path))
    return BacklinkSynchronizer(store, NoteResolver(store, config), config)


def _log_call(tool_name: str, start_time: float, **extra: Any) -> None:
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "MCP tool called",
        extra={"tool_name": tool_name, "duration_ms": f"{duration_ms:.2f}", **extra},
    )


async def extract_references(
    body: Annotated[str, Field(description="Markdown body to scan for [[wikilinks]].")],
) -> List[Dict[str, Any]]:
    start_time = time.time()
    references = scan_references(body)
    _log_call("extract_references", start_time, result_count=len(references))
    return [reference.model_dump() for reference in references]


async def resolve_reference(
    display_text: Annotated[str, Field(description="Wikilink display text, without brackets.")],
    create_if_missing: Annotated[
        bool, Field(description="Create a stub note when nothing matches.")
    ] = False,
) -> Dict[str, Any]:
    start_time = time.time()
    user_id = _current_user_id()
    resolution = await _synchronizer().resolver.resolve(
        user_id, display_text, ResolveOptions(create_if_missing=create_if_missing)
    )
    _log_call(
        "resolve_reference",
        start_time,
        user_id=user_id,
        matched_by=resolution.matched_by or "miss",
    )
    return resolution.model_dump()


async def synchronize_backlinks(
    note_id: Annotated[str, Field(description="Note whose outgoing links are rebuilt.")],
    create_if_missing: Annotated[
        Optional[bool],
        Field(description="Create stub notes for unresolved links; defaults to server config."),
    ] = None,
) -> Dict[str, Any]:
    start_time = time.time()
    user_id = _current_user_id()
    synchronizer = _synchronizer()

    note = await synchronizer.store.get_note(note_id)
    if note is None:
        raise NoteNotFoundError(note_id)
    result = await synchronizer.synchronize_backlinks(
        user_id, note.id, note.body, create_if_missing=create_if_missing
    )
    _log_call(
        "synchronize_backlinks",
        start_time,
        user_id=user_id,
        note_id=note_id,
        inserted=result.inserted,
    )
    return result.model_dump(mode="json")


async def get_backlinks(
    note_id: Annotated[str, Field(description="Note to list incoming links for.")],
) -> List[Dict[str, Any]]:
    start_time = time.time()
    edges = await _synchronizer().backlinks(note_id)
    _log_call("get_backlinks", start_time, note_id=note_id, result_count=len(edges))
    return [edge.model_dump(mode="json") for edge in edges]


async def parse_quiz_text(
    text: Annotated[str, Field(description="Pasted multiple-choice quiz text.")],
) -> Dict[str, Any]:
    start_time = time.time()
    result = QuizTextParser.from_config(get_config()).parse(text)
    _log_call(
        "parse_quiz_text",
        start_time,
        questions=len(result.questions),
        errors=len(result.errors),
    )
    return result.model_dump()


mcp.tool(
    name="extract_references",
    description="List the [[wikilinks]] in a Markdown body in source order.",
)(extract_references)
mcp.tool(
    name="resolve_reference",
    description="Resolve wikilink display text to a note id (exact title, then substring).",
)(resolve_reference)
mcp.tool(
    name="synchronize_backlinks",
    description="Rebuild a note's outgoing links from its stored body.",
)(synchronize_backlinks)
mcp.tool(name="get_backlinks", description="List links pointing at a note.")(get_backlinks)
mcp.tool(
    name="parse_quiz_text",
    description="Parse multiple-choice quiz text into questions and per-block errors.",
)(parse_quiz_text)


if __name__ == "__main__":
    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"

    if transport == "http":
        port = int(os.getenv("MCP_PORT", "8001"))
        host = os.getenv("MCP_HOST", "127.0.0.1")
        logger.info(
            "Starting MCP server",
            extra={"transport": transport, "host": host, "port": port},
        )
        mcp.run(transport=transport, host=host, port=port)
    else:
        logger.info("Starting MCP server", extra={"transport": transport})
        mcp.run(transport=transport)
