"""
Stores de persistance sur disque.

- CorrectionStore : historique des corrections par utilisateur
- ConfigStore : documents de configuration (modèle actif)
"""

from .config_store import ConfigStore
from .correction_store import CorrectionStore

__all__ = ["ConfigStore", "CorrectionStore"]
