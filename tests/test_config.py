"""
Tests pour les réglages lus depuis l'environnement.
"""

import pytest

from french_corrector.config import (
    DEFAULT_DATA_DIR,
    DEFAULT_MODEL_NAME,
    DEFAULT_TIMEOUT,
    RetrySettings,
    load_settings,
    lock_config,
)
from french_corrector.exceptions import ConfigurationError


ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_BASE_URL",
    "GEMINI_REST_URL",
    "CORRECTOR_PROXY_URL",
    "CORRECTOR_DATA_DIR",
    "CORRECTOR_USER",
    "CORRECTOR_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        # setenv puis delenv : la variable est retirée à la fin du test même si
        # load_dotenv l'a définie entre-temps
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env):
    settings = load_settings(dotenv=False)

    assert settings.api_key is None
    assert settings.model_name == DEFAULT_MODEL_NAME
    assert settings.proxy_url is None
    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.user_id == "local"
    assert settings.timeout == DEFAULT_TIMEOUT


def test_from_environment(clean_env):
    clean_env.setenv("GEMINI_API_KEY", "k")
    clean_env.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    clean_env.setenv("CORRECTOR_TIMEOUT", "12.5")

    settings = load_settings(dotenv=False)

    assert settings.require_api_key() == "k"
    assert settings.model_name == "gemini-2.5-pro"
    assert settings.timeout == 12.5


def test_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("GEMINI_MODEL=depuis-dotenv\n", encoding="utf-8")
    clean_env.chdir(tmp_path)

    assert load_settings().model_name == "depuis-dotenv"


def test_require_api_key(clean_env):
    with pytest.raises(ConfigurationError):
        load_settings(dotenv=False).require_api_key()


def test_repr_masks_key(clean_env):
    clean_env.setenv("GEMINI_API_KEY", "tres-secret")

    assert "tres-secret" not in repr(load_settings(dotenv=False))


def test_invalid_timeout(clean_env):
    clean_env.setenv("CORRECTOR_TIMEOUT", "trente")

    with pytest.raises(ConfigurationError):
        load_settings(dotenv=False)


def test_lock_config():
    lock_config()
    lock_config()

    with pytest.raises(AttributeError):
        RetrySettings().max_retries = 10
    assert RetrySettings().max_retries == 3
