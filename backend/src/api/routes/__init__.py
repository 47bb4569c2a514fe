"""HTTP API route handlers."""

from . import flashcards, folders, notes, quiz, references

__all__ = ["notes", "references", "quiz", "flashcards", "folders"]
