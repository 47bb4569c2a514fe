"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATABASE_PATH = PROJECT_ROOT / "data" / "notes.db"
DEFAULT_STUB_BODY = "# {title}\n\nNote created from wikilink."


def _split_labels(value: str | Tuple[str, ...] | list | None) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(item.strip() for item in items if item and item.strip())


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    database_path: Path = Field(
        default=DEFAULT_DATABASE_PATH, description="SQLite file backing notes and links"
    )
    local_user_id: str = Field(
        default="local-dev",
        min_length=1,
        description="Owner identity used when a request does not name one",
    )
    auto_create_on_miss: bool = Field(
        default=True,
        description="Create a stub note when a wikilink resolves to nothing on save",
    )
    stub_body_template: str = Field(
        default=DEFAULT_STUB_BODY,
        description="Body for notes created from an unresolved wikilink ({title} placeholder)",
    )
    quiz_question_labels: Tuple[str, ...] = Field(
        default=("Pregunta", "Question"),
        description="Accepted question header labels (case-insensitive)",
    )
    quiz_answer_labels: Tuple[str, ...] = Field(
        default=("Respuesta", "Answer"),
        description="Accepted answer line labels (case-insensitive)",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_database_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            return DEFAULT_DATABASE_PATH
        path = value if isinstance(value, Path) else Path(value)
        return path.expanduser().resolve()

    @field_validator("stub_body_template")
    @classmethod
    def _ensure_title_placeholder(cls, value: str) -> str:
        if "{title}" not in value:
            raise ValueError("STUB_NOTE_BODY must contain a {title} placeholder")
        return value

    @field_validator("quiz_question_labels", "quiz_answer_labels", mode="before")
    @classmethod
    def _parse_labels(cls, value: str | Tuple[str, ...] | list | None) -> Tuple[str, ...]:
        labels = _split_labels(value)
        if not labels:
            raise ValueError("At least one quiz label is required")
        return labels

    @field_validator("log_level", mode="before")
    @classmethod
    def _check_log_level(cls, value: Optional[str]) -> str:
        level = (value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL: {value}")
        return level


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    auto_create = _read_env("AUTO_CREATE_ON_MISS", "true").lower() not in {
        "0",
        "false",
        "no",
    }

    config = AppConfig(
        database_path=_read_env("DATABASE_PATH", str(DEFAULT_DATABASE_PATH)),
        local_user_id=_read_env("LOCAL_USER_ID", "local-dev"),
        auto_create_on_miss=auto_create,
        stub_body_template=_read_env("STUB_NOTE_BODY", DEFAULT_STUB_BODY),
        quiz_question_labels=_read_env("QUIZ_QUESTION_LABELS", "Pregunta,Question"),
        quiz_answer_labels=_read_env("QUIZ_ANSWER_LABELS", "Respuesta,Answer"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
    )
    # Ensure the data directory exists for downstream services.
    config.database_path.parent.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "PROJECT_ROOT",
    "DEFAULT_DATABASE_PATH",
    "DEFAULT_STUB_BODY",
]
