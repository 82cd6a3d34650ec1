"""Documents de configuration de l'application (app_config.json)."""

import threading
from pathlib import Path
from typing import Any, Optional, Union

from .json_file import read_json, write_json_atomic


class ConfigStore:
    """
    Stockage clé → document JSON.

    Example:
        >>> store = ConfigStore(".corrector_data")
        >>> store.set("gemini_model", {"modelName": "gemini-2.5-flash"})
        >>> store.get("gemini_model")["modelName"]
        'gemini-2.5-flash'
    """

    FILENAME = "app_config.json"

    def __init__(self, data_dir: Union[str, Path] = ".corrector_data") -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / self.FILENAME
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        return read_json(self.path, {})

    def get(self, name: str) -> Optional[dict[str, Any]]:
        """Retourne le document `name`, ou None s'il n'existe pas."""
        with self._lock:
            return self._load().get(name)

    def set(self, name: str, value: dict[str, Any]) -> None:
        with self._lock:
            data = self._load()
            data[name] = value
            write_json_atomic(self.path, data)
