from pathlib import Path

import pytest

from backend.src.services.config import AppConfig
from backend.src.services.database import DatabaseService
from backend.src.services.store import SQLiteNoteStore


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(database_path=tmp_path / "notes.db", auto_create_on_miss=False)


@pytest.fixture
def db_service(app_config: AppConfig) -> DatabaseService:
    service = DatabaseService(app_config.database_path)
    service.initialize()
    return service


@pytest.fixture
def store(db_service: DatabaseService) -> SQLiteNoteStore:
    return SQLiteNoteStore(db_service)
