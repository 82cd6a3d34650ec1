"""
Configuration de french-corrector.

Deux niveaux :
- Classes singleton verrouillables (templates, logs, retry) pour les réglages statiques.
- `Settings` pour les valeurs issues de l'environnement (.env via python-dotenv).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError


DEFAULT_MODEL_NAME = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_REST_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_DATA_DIR = ".corrector_data"
DEFAULT_TIMEOUT = 30.0

# Modèles proposés à l'administrateur
AVAILABLE_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.5-flash-preview-05-20",
    "gemini-1.5-pro-latest",
    "gemini-1.5-flash",
]


class ConfigBase:
    # Attribut de classe pour le singleton
    _instance = None
    _locked: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def lock(self):
        if not self._locked:
            self._locked = True

    def __setattr__(self, name, value):
        if getattr(self, "_locked", False):
            raise AttributeError("Configuration is locked")
        super().__setattr__(name, value)


class TemplateNames(ConfigBase):
    Correction_Template: str = "correction.jinja"
    Study_Advice_Template: str = "study_advice.jinja"


class Logger_Level(ConfigBase):
    level: int = logging.INFO
    console_level: int = logging.ERROR
    file_level: int = logging.DEBUG


class RetrySettings(ConfigBase):
    max_retries: int = 3
    initial_delay_ms: int = 1000


def lock_config():
    """Verrouille la configuration pour empêcher les modifications ultérieures."""
    Logger_Level().lock()
    TemplateNames().lock()
    RetrySettings().lock()


@dataclass(frozen=True)
class Settings:
    """
    Réglages lus depuis l'environnement.

    La clé API n'apparaît jamais dans `repr()` pour éviter toute fuite dans les logs.
    """

    api_key: Optional[str]
    model_name: str
    base_url: str
    rest_url: str
    proxy_url: Optional[str]
    data_dir: str
    user_id: str
    timeout: float

    def __repr__(self) -> str:
        return (
            f"Settings(model_name={self.model_name!r}, base_url={self.base_url!r}, "
            f"proxy_url={self.proxy_url!r}, data_dir={self.data_dir!r}, "
            f"user_id={self.user_id!r}, timeout={self.timeout}, "
            f"api_key={'***' if self.api_key else None})"
        )

    def require_api_key(self) -> str:
        """Retourne la clé API ou lève ConfigurationError si elle est absente."""
        if not self.api_key:
            raise ConfigurationError(
                "La clé API Gemini n'est pas définie (variable GEMINI_API_KEY)."
            )
        return self.api_key


def load_settings(dotenv: bool = True) -> Settings:
    """
    Construit les réglages depuis les variables d'environnement.

    Args:
        dotenv: Charger d'abord le fichier .env s'il existe

    Returns:
        Settings prêts à l'emploi

    Raises:
        ConfigurationError: Si CORRECTOR_TIMEOUT n'est pas un nombre
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    raw_timeout = os.getenv("CORRECTOR_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError as e:
        raise ConfigurationError(
            f"CORRECTOR_TIMEOUT invalide : {raw_timeout!r}"
        ) from e

    return Settings(
        api_key=os.getenv("GEMINI_API_KEY") or None,
        model_name=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL_NAME,
        base_url=os.getenv("GEMINI_BASE_URL") or DEFAULT_BASE_URL,
        rest_url=os.getenv("GEMINI_REST_URL") or DEFAULT_REST_URL,
        proxy_url=os.getenv("CORRECTOR_PROXY_URL") or None,
        data_dir=os.getenv("CORRECTOR_DATA_DIR") or DEFAULT_DATA_DIR,
        user_id=os.getenv("CORRECTOR_USER") or "local",
        timeout=timeout,
    )
