"""
Persistance des corrections sur disque.

Format de stockage (corrections.json) :
    {"corrections": [{"id", "userId", "originalText", "correctedText",
                      "corrections": [...], "createdAt": ISO-8601}, ...]}

Un enregistrement est immuable après création ; seule la suppression est possible.
"""

import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from ..logger import get_logger
from ..models import CorrectionItem, StoredCorrection
from .json_file import read_json, write_json_atomic

logger = get_logger(__name__)


class CorrectionStore:
    """
    Gestionnaire de persistance des corrections d'un utilisateur.

    Attributes:
        data_dir: Répertoire contenant corrections.json
    """

    FILENAME = "corrections.json"

    def __init__(self, data_dir: Union[str, Path] = ".corrector_data") -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / self.FILENAME
        self._lock = threading.Lock()

    def _load(self) -> list[dict[str, Any]]:
        return list(read_json(self.path, {}).get("corrections", []))

    def _write(self, records: list[dict[str, Any]]) -> None:
        write_json_atomic(self.path, {"corrections": records})

    def save(
        self,
        user_id: str,
        original_text: str,
        corrected_text: str,
        corrections: Iterable[CorrectionItem],
    ) -> StoredCorrection:
        """
        Enregistre une correction réussie.

        Args:
            user_id: Identifiant de l'utilisateur connecté
            original_text: Texte soumis
            corrected_text: Texte corrigé
            corrections: Corrections détaillées

        Returns:
            La correction persistée avec son id et sa date de création

        Raises:
            ValueError: Si aucun utilisateur n'est connecté (user_id vide)
        """
        if not user_id:
            raise ValueError("Utilisateur non authentifié")

        stored = StoredCorrection(
            id=uuid.uuid4().hex,
            user_id=user_id,
            original_text=original_text,
            corrected_text=corrected_text,
            created_at=datetime.now(timezone.utc),
            corrections=tuple(corrections),
        )
        with self._lock:
            records = self._load()
            records.append(stored.to_dict())
            self._write(records)

        logger.info(f"💾 Correction {stored.id} enregistrée pour {user_id}")
        return stored

    def list(self, user_id: str) -> list[StoredCorrection]:
        """Corrections de l'utilisateur, de la plus récente à la plus ancienne."""
        with self._lock:
            records = self._load()
        corrections = [
            StoredCorrection.from_dict(record)
            for record in records
            if record.get("userId") == user_id
        ]
        corrections.sort(key=lambda stored: stored.created_at, reverse=True)
        return corrections

    def get(self, correction_id: str) -> Optional[StoredCorrection]:
        with self._lock:
            records = self._load()
        for record in records:
            if record.get("id") == correction_id:
                return StoredCorrection.from_dict(record)
        return None

    def delete(self, correction_id: str) -> bool:
        """
        Supprime une correction.

        Returns:
            True si un enregistrement a été supprimé, False s'il n'existait pas
        """
        with self._lock:
            records = self._load()
            remaining = [record for record in records if record.get("id") != correction_id]
            if len(remaining) == len(records):
                return False
            self._write(remaining)

        logger.info(f"🗑️ Correction {correction_id} supprimée")
        return True
