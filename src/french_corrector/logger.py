"""
Journalisation de french-corrector.

Chaque module obtient son logger via `get_logger(__name__)`. Les fichiers d'une
exécution sont regroupés dans <data_dir>/logs/run_YYYYMMDD_HHMMSS/ :
- correction.log pour les messages des modules
- llm_<contexte>_0001_....log pour chaque requête au modèle

Rien n'est créé sur disque avant le premier message écrit.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .config import DEFAULT_DATA_DIR, Logger_Level


LOG_FILENAME = "correction.log"

_FORMATTER = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def default_log_root() -> Path:
    """Racine des logs quand aucune n'est configurée : <CORRECTOR_DATA_DIR>/logs."""
    return Path(os.getenv("CORRECTOR_DATA_DIR") or DEFAULT_DATA_DIR) / "logs"


class LogSession:
    """
    Répertoire de logs de l'exécution en cours.

    Le répertoire est choisi et créé au premier accès. `configure` change la
    racine (répertoire de données des Settings) et démarre une nouvelle session.
    """

    root: Optional[Path] = None
    _session_dir: Optional[Path] = None

    @classmethod
    def configure(cls, root: Optional[Path] = None) -> None:
        cls.root = Path(root) if root is not None else None
        cls._session_dir = None

    @classmethod
    def get_session_dir(cls) -> Path:
        if cls._session_dir is None:
            root = cls.root or default_log_root()
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            session_dir = root / f"run_{timestamp}"
            session_dir.mkdir(parents=True, exist_ok=True)
            cls._session_dir = session_dir
        return cls._session_dir


class TqdmLoggingHandler(logging.Handler):
    """Sortie console via tqdm.write() pour ne pas casser la barre de `correct -f`."""

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


class SessionFileHandler(logging.Handler):
    """
    Écrit dans <session>/<filename>, ouvert au premier message.

    Le fichier suit la session courante : après `LogSession.configure`,
    le message suivant part dans le nouveau répertoire.
    """

    def __init__(self, filename: str = LOG_FILENAME, level: int = logging.NOTSET):
        super().__init__(level)
        self.filename = filename
        self.path: Optional[Path] = None
        self._file: Optional[logging.FileHandler] = None

    def _current_file(self) -> logging.FileHandler:
        path = LogSession.get_session_dir() / self.filename
        if self._file is None or self.path != path:
            if self._file is not None:
                self._file.close()
            self._file = logging.FileHandler(path, encoding="utf-8")
            self._file.setFormatter(self.formatter)
            self.path = path
        return self._file

    def emit(self, record):
        try:
            self._current_file().emit(record)
        except Exception:
            self.handleError(record)

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None
        super().close()


def get_logger(name: str) -> logging.Logger:
    """
    Logger du module `name` : console (niveau ERROR par défaut) + correction.log.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("✅ Texte corrigé")
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(Logger_Level.level)

    console_handler = TqdmLoggingHandler(level=Logger_Level.console_level)
    console_handler.setFormatter(_FORMATTER)
    logger.addHandler(console_handler)

    file_handler = SessionFileHandler(level=Logger_Level.file_level)
    file_handler.setFormatter(_FORMATTER)
    logger.addHandler(file_handler)

    return logger


def get_session_log_path(filename: str) -> Path:
    """Chemin d'un fichier de log de requête dans le répertoire de session."""
    return LogSession.get_session_dir() / filename
