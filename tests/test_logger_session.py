"""
Tests pour les logs par session, créés seulement au premier message.
"""

from french_corrector.logger import (
    LOG_FILENAME,
    LogSession,
    SessionFileHandler,
    get_logger,
    get_session_log_path,
)


def test_nothing_written_before_first_message(tmp_path):
    """Créer un logger ne crée ni répertoire ni fichier."""
    LogSession.configure(tmp_path / "lazy")
    logger = get_logger("test.corrector.lazy")

    assert not (tmp_path / "lazy").exists()

    logger.info("Correction terminée")

    log_file = LogSession.get_session_dir() / LOG_FILENAME
    assert LogSession.get_session_dir().parent == tmp_path / "lazy"
    assert "Correction terminée" in log_file.read_text(encoding="utf-8")


def test_default_root_follows_data_dir(tmp_path, monkeypatch):
    """Sans racine configurée, les logs vont dans <CORRECTOR_DATA_DIR>/logs."""
    monkeypatch.setenv("CORRECTOR_DATA_DIR", str(tmp_path / "donnees"))
    LogSession.configure()

    session_dir = LogSession.get_session_dir()

    assert session_dir.name.startswith("run_")
    assert session_dir.parent == tmp_path / "donnees" / "logs"
    assert session_dir.is_dir()


def test_session_dir_is_stable(tmp_path):
    LogSession.configure(tmp_path / "logs")
    assert LogSession.get_session_dir() == LogSession.get_session_dir()


def test_file_handler_follows_new_session(tmp_path):
    """Après configure(), le message suivant part dans la nouvelle session."""
    logger = get_logger("test.corrector.follow")
    file_handler = next(h for h in logger.handlers if isinstance(h, SessionFileHandler))

    LogSession.configure(tmp_path / "premier")
    logger.info("premier message")
    first_path = file_handler.path

    LogSession.configure(tmp_path / "second")
    logger.info("second message")

    assert first_path.parent.parent == tmp_path / "premier"
    assert file_handler.path.parent.parent == tmp_path / "second"
    assert "second message" not in first_path.read_text(encoding="utf-8")
    assert "second message" in file_handler.path.read_text(encoding="utf-8")


def test_get_logger_avoids_duplicate_handlers():
    logger1 = get_logger("test.corrector.duplicate")
    logger2 = get_logger("test.corrector.duplicate")

    assert logger1 is logger2
    assert len(logger1.handlers) == 2


def test_get_session_log_path():
    path = get_session_log_path("llm_correction_0001.log")
    assert path == LogSession.get_session_dir() / "llm_correction_0001.log"
