from pathlib import Path

import pytest

from backend.src.services import config as config_module


@pytest.fixture(autouse=True)
def restore_config_cache():
    """
    Ensure configuration cache is cleared between tests.
    """
    config_module.reload_config()
    yield
    config_module.reload_config()


def test_get_config_reads_database_path(monkeypatch, tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "notes.db"
    monkeypatch.setenv("DATABASE_PATH", str(db_path))

    cfg = config_module.reload_config()

    assert cfg.database_path == db_path.resolve()
    assert db_path.parent.is_dir()


def test_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "notes.db"))
    for key in (
        "LOCAL_USER_ID",
        "AUTO_CREATE_ON_MISS",
        "STUB_NOTE_BODY",
        "QUIZ_QUESTION_LABELS",
        "QUIZ_ANSWER_LABELS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)

    cfg = config_module.reload_config()

    assert cfg.local_user_id == "local-dev"
    assert cfg.auto_create_on_miss is True
    assert cfg.stub_body_template.format(title="X").startswith("# X")
    assert cfg.quiz_question_labels == ("Pregunta", "Question")
    assert cfg.quiz_answer_labels == ("Respuesta", "Answer")
    assert cfg.log_level == "INFO"


def test_auto_create_can_be_disabled(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "notes.db"))
    monkeypatch.setenv("AUTO_CREATE_ON_MISS", "false")

    assert config_module.reload_config().auto_create_on_miss is False


def test_quiz_labels_are_split_and_trimmed(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "notes.db"))
    monkeypatch.setenv("QUIZ_QUESTION_LABELS", " Frage , Question ,")

    cfg = config_module.reload_config()

    assert cfg.quiz_question_labels == ("Frage", "Question")


def test_stub_body_requires_title_placeholder(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "notes.db"))
    monkeypatch.setenv("STUB_NOTE_BODY", "no placeholder")

    with pytest.raises(ValueError):
        config_module.reload_config()


def test_rejects_unknown_log_level(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "notes.db"))
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(ValueError):
        config_module.reload_config()
