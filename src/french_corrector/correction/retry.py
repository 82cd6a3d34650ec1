"""Politique de retry unique du système : backoff exponentiel sur limite de débit."""

import time
from typing import Callable, Optional, TypeVar

from ..config import RetrySettings
from ..exceptions import RateLimited, RetriesExhausted
from ..logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def is_rate_limited(error: BaseException) -> bool:
    """Seules les erreurs RateLimited sont réessayées."""
    return isinstance(error, RateLimited)


def exponential_backoff(initial_delay_ms: float, attempt_index: int) -> float:
    """
    Délai avant la tentative suivante, en millisecondes.

    Example:
        >>> [exponential_backoff(1000, i) for i in range(3)]
        [1000, 2000, 4000]
    """
    return initial_delay_ms * (2**attempt_index)


class RetryController:
    """
    Exécute une opération avec retry borné.

    La politique (quelles erreurs, quel délai) est découplée de l'opération :
    le même contrôleur enveloppe la correction et les conseils d'étude.

    Example:
        >>> controller = RetryController()
        >>> result = controller.attempt(lambda: gateway.invoke(prompt))
    """

    def __init__(
        self,
        max_retries: int = RetrySettings.max_retries,
        initial_delay_ms: float = RetrySettings.initial_delay_ms,
        is_retryable: Callable[[BaseException], bool] = is_rate_limited,
        backoff: Callable[[float, int], float] = exponential_backoff,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self.is_retryable = is_retryable
        self.backoff = backoff
        self.sleep = sleep

    def attempt(
        self,
        operation: Callable[[], T],
        max_retries: Optional[int] = None,
        initial_delay_ms: Optional[float] = None,
    ) -> T:
        """
        Appelle `operation` jusqu'à `max_retries` fois.

        - Succès : retour immédiat
        - Erreur réessayable avec tentatives restantes : attente
          initial_delay_ms * 2^index puis nouvel essai
        - Erreur non réessayable : propagée immédiatement
        - Erreur réessayable à la dernière tentative : RetriesExhausted

        Raises:
            RetriesExhausted: La limite de débit a persisté sur toutes les tentatives
            ValueError: Si max_retries < 1
        """
        retries = self.max_retries if max_retries is None else max_retries
        delay_ms = self.initial_delay_ms if initial_delay_ms is None else initial_delay_ms
        if retries < 1:
            raise ValueError(f"max_retries doit être >= 1 (reçu : {retries})")

        last_error: Optional[BaseException] = None
        for attempt_index in range(retries):
            try:
                result = operation()
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                last_error = e
                logger.warning(
                    f"🚦 Limite de débit atteinte (tentative {attempt_index + 1}/{retries})"
                )
                if attempt_index < retries - 1:
                    wait_ms = self.backoff(delay_ms, attempt_index)
                    logger.info(f"⏳ Attente de {wait_ms / 1000:.1f}s avant nouvelle tentative...")
                    self.sleep(wait_ms / 1000)
                continue

            if attempt_index > 0:
                logger.info(f"✅ Requête réussie après {attempt_index + 1} tentative(s)")
            return result

        logger.error(f"❌ Échec définitif après {retries} tentatives")
        raise RetriesExhausted(attempts=retries) from last_error
