"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from .middleware import register_error_handlers
from .routes import flashcards, folders, notes, quiz, references
from ..services.config import get_config
from ..services.database import init_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema before serving requests."""
    db_path = init_database(get_config().database_path)
    logger.info("Startup complete", extra={"database_path": str(db_path)})
    yield


app = FastAPI(
    title="Note Graph API",
    description="Notes with wikilink backlinks, quiz parsing and flashcards",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(notes.router)
app.include_router(references.router)
app.include_router(quiz.router)
app.include_router(flashcards.router)
app.include_router(folders.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


__all__ = ["app"]
