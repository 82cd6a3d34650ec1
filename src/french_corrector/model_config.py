"""
Configuration du modèle actif et cache de son identifiant.

Le cache est un objet explicite injecté dans les passerelles : il peut rester
périmé jusqu'à `invalidate()`, appelé automatiquement après chaque mise à jour
par `ModelConfigService.update_model_config`.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .config import DEFAULT_MODEL_NAME
from .logger import get_logger
from .stores.config_store import ConfigStore

logger = get_logger(__name__)

MODEL_CONFIG_DOC = "gemini_model"


@dataclass(frozen=True)
class ModelConfig:
    model_name: str
    updated_at: datetime
    updated_by: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "modelName": self.model_name,
            "updatedAt": self.updated_at.isoformat(),
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelConfig":
        raw_date = data.get("updatedAt")
        updated_at = (
            datetime.fromisoformat(raw_date)
            if isinstance(raw_date, str)
            else datetime.now(timezone.utc)
        )
        return cls(
            model_name=data.get("modelName") or DEFAULT_MODEL_NAME,
            updated_at=updated_at,
            updated_by=data.get("updatedBy") or "system",
        )


def default_model_config(
    updated_by: str = "system", model_name: str = DEFAULT_MODEL_NAME
) -> ModelConfig:
    return ModelConfig(
        model_name=model_name,
        updated_at=datetime.now(timezone.utc),
        updated_by=updated_by,
    )


class ModelNameCache:
    """Cache en mémoire de l'identifiant du modèle actif."""

    def __init__(self, model_name: Optional[str] = None):
        self._model_name = model_name

    def get(self) -> Optional[str]:
        return self._model_name

    def set(self, model_name: str) -> None:
        self._model_name = model_name

    def invalidate(self) -> None:
        self._model_name = None


class ModelConfigService:
    """
    Lecture et mise à jour de la configuration du modèle.

    Args:
        store: Stockage des documents de configuration
        cache: Cache de l'identifiant du modèle (un nouveau si None)
        default_model_name: Modèle enregistré quand aucune configuration n'existe
    """

    def __init__(
        self,
        store: ConfigStore,
        cache: Optional[ModelNameCache] = None,
        default_model_name: str = DEFAULT_MODEL_NAME,
    ):
        self.store = store
        self.cache = cache if cache is not None else ModelNameCache()
        self.default_model_name = default_model_name

    def get_model_config(self, user_id: str) -> ModelConfig:
        """
        Retourne la configuration courante, créée avec les valeurs par défaut si absente.

        Une erreur de lecture est journalisée et la configuration par défaut renvoyée.
        """
        try:
            data = self.store.get(MODEL_CONFIG_DOC)
            if data is not None:
                return ModelConfig.from_dict(data)

            config = default_model_config(updated_by=user_id, model_name=self.default_model_name)
            self.store.set(MODEL_CONFIG_DOC, config.to_dict())
            logger.info(f"⚙️ Configuration du modèle créée par défaut ({config.model_name})")
            return config
        except (OSError, ValueError) as e:
            logger.error(f"❌ Lecture de la configuration du modèle impossible : {e}")
            return default_model_config(model_name=self.default_model_name)

    def update_model_config(self, model_name: str, user_id: str) -> ModelConfig:
        """
        Change le modèle actif et invalide le cache.

        Raises:
            ValueError: Si le nom du modèle est vide
            OSError: Si l'écriture échoue
        """
        model_name = model_name.strip()
        if not model_name:
            raise ValueError("Le nom du modèle est vide")

        config = ModelConfig(
            model_name=model_name,
            updated_at=datetime.now(timezone.utc),
            updated_by=user_id,
        )
        self.store.set(MODEL_CONFIG_DOC, config.to_dict())
        self.cache.invalidate()
        logger.info(f"⚙️ Modèle actif changé en {model_name} par {user_id}")
        return config

    def get_current_model_name(self, user_id: str) -> str:
        """Identifiant du modèle actif, servi depuis le cache quand il est renseigné."""
        cached = self.cache.get()
        if cached:
            return cached

        model_name = self.get_model_config(user_id).model_name
        self.cache.set(model_name)
        return model_name
