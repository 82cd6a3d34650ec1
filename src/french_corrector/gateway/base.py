"""
Contrat commun des passerelles vers le modèle génératif.

Une passerelle reçoit un prompt et renvoie le texte brut produit par le modèle.
Elle classe les erreurs de transport (RateLimited / TransportError) et ne
transmet jamais la clé API à l'appelant ni aux logs.
"""

import datetime
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from ..exceptions import MalformedResponse
from ..logger import get_session_log_path


JSON_GENERATION_CONFIG: dict[str, Any] = {"responseMimeType": "application/json"}


def wants_json(generation_config: Optional[dict[str, Any]]) -> bool:
    """Indique si la config de génération demande une sortie JSON."""
    if not generation_config:
        return False
    return generation_config.get("responseMimeType") == "application/json"


def extract_response_text(payload: Any) -> str:
    """
    Normalise une réponse du service en texte brut.

    Formats acceptés :
    - une chaîne (corps texte)
    - {"data": ...} (format des fonctions appelables), déballé récursivement
    - {"candidates": [{"content": {"parts": [{"text": ...}, ...]}}]}
    - {"text": ...}

    Raises:
        MalformedResponse: Aucun texte trouvé dans la réponse
    """
    if isinstance(payload, str):
        return payload

    if isinstance(payload, dict):
        if "data" in payload:
            return extract_response_text(payload["data"])

        candidates = payload.get("candidates")
        if isinstance(candidates, list) and candidates:
            content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list):
                texts = [
                    part["text"]
                    for part in parts
                    if isinstance(part, dict) and isinstance(part.get("text"), str)
                ]
                if texts:
                    return "".join(texts)

        if isinstance(payload.get("text"), str):
            return payload["text"]

    raise MalformedResponse(
        "La réponse du service ne contient aucun texte généré.",
        raw_text=str(payload),
    )


class ModelGateway(ABC):
    """
    Passerelle vers le modèle.

    Les sous-classes implémentent `invoke` ; la classe de base fournit
    la journalisation de chaque requête dans un fichier dédié.
    """

    def __init__(self):
        self._log_counter = 0

    @abstractmethod
    def invoke(
        self,
        prompt: str,
        generation_config: Optional[dict[str, Any]] = None,
        context: Optional[str] = None,
    ) -> str:
        """
        Envoie le prompt au modèle et renvoie le texte brut.

        Raises:
            ConfigurationError: Clé ou modèle introuvable (avant tout appel réseau)
            RateLimited: Statut 429
            TransportError: Autre statut d'échec ou erreur réseau
        """

    # -----------------------------------
    # 🔹 Gestion du log de requête
    # -----------------------------------
    def _create_log(self, model_name: str, prompt: str, context: Optional[str] = None) -> Path:
        """
        Écrit l'en-tête du log de la requête et retourne son chemin.

        Format du nom : llm_<context>_<counter>_<timestamp>.log
        """
        timestamp = datetime.datetime.now().isoformat().replace(":", "-")
        self._log_counter += 1
        if context:
            filename = f"llm_{context}_{self._log_counter:04d}_{timestamp}.log"
        else:
            filename = f"llm_{self._log_counter:04d}_{timestamp}.log"

        log_path = get_session_log_path(filename)
        header = (
            f"=== LLM REQUEST LOG ===\n"
            f"Timestamp : {timestamp}\n"
            f"Gateway   : {type(self).__name__}\n"
            f"Model     : {model_name}\n"
            f"Prompt len: {len(prompt)} chars\n"
            f"{'-'*40}\n\n"
            f"--- PROMPT ---\n{prompt}\n\n"
            f"--- RESPONSE ---\n"
        )
        with open(log_path, "w", encoding="utf-8") as f:
            f.write(header)
        return log_path

    def _append_response(self, log_path: Path, response: str):
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(response.strip() + "\n")
