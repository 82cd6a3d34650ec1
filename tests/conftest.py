"""
Configuration pytest pour les tests french-corrector.

Ce fichier contient les fixtures communes à tous les tests.
"""

from typing import Any, Optional

import pytest

from french_corrector.correction.retry import RetryController
from french_corrector.gateway.base import ModelGateway
from french_corrector.logger import LogSession


class FakeGateway(ModelGateway):
    """
    Passerelle de test : renvoie ou lève les éléments de `outcomes` dans l'ordre.

    Le dernier élément est réutilisé quand la liste est épuisée.
    """

    def __init__(self, *outcomes: Any):
        super().__init__()
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def invoke(
        self,
        prompt: str,
        generation_config: Optional[dict[str, Any]] = None,
        context: Optional[str] = None,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "generation_config": generation_config, "context": context}
        )
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def isolated_log_session(tmp_path):
    """Redirige les logs de requête vers un répertoire temporaire."""
    LogSession.configure(tmp_path / "logs")
    yield
    LogSession.configure()


@pytest.fixture
def sleeps():
    """Liste des délais demandés au RetryController (en secondes)."""
    return []


@pytest.fixture
def retry(sleeps):
    """RetryController sans attente réelle."""
    return RetryController(max_retries=3, initial_delay_ms=1000, sleep=sleeps.append)


@pytest.fixture
def data_dir(tmp_path):
    """Répertoire temporaire pour les stores JSON."""
    directory = tmp_path / "data"
    directory.mkdir(exist_ok=True)
    return directory
