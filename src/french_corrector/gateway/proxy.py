"""
Passerelle via le proxy serveur, qui détient la clé API.

Le modèle actif est résolu côté client via ModelConfigService (et son cache)
puis transmis au proxy avec le prompt.
"""

from typing import Any, Optional

import httpx

from ..config import DEFAULT_TIMEOUT
from ..exceptions import ConfigurationError, RateLimited, TransportError
from ..logger import get_logger
from ..model_config import ModelConfigService
from .base import ModelGateway, extract_response_text

logger = get_logger(__name__)


class ProxyGateway(ModelGateway):
    """
    Envoie les prompts au proxy au format des fonctions appelables :
    {"data": {"prompt", "options", "userId", "model"}}.

    Example:
        >>> gateway = ProxyGateway("http://localhost:8080/geminiProxy", config_service, "uid")
        >>> raw = gateway.invoke(prompt)
    """

    def __init__(
        self,
        proxy_url: Optional[str],
        config_service: ModelConfigService,
        user_id: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__()
        if not proxy_url:
            raise ConfigurationError("L'URL du proxy n'est pas configurée (CORRECTOR_PROXY_URL).")
        self.proxy_url = proxy_url
        self.config_service = config_service
        self.user_id = user_id
        self.client = client or httpx.Client(timeout=timeout)

    def __repr__(self) -> str:
        return f"ProxyGateway(proxy_url={self.proxy_url!r}, user_id={self.user_id!r})"

    def close(self) -> None:
        self.client.close()

    def resolve_model_name(self) -> str:
        model_name = self.config_service.get_current_model_name(self.user_id)
        if not model_name:
            raise ConfigurationError("Aucun modèle n'est configuré.")
        return model_name

    def invoke(
        self,
        prompt: str,
        generation_config: Optional[dict[str, Any]] = None,
        context: Optional[str] = None,
    ) -> str:
        model_name = self.resolve_model_name()
        payload: dict[str, Any] = {
            "prompt": prompt,
            "userId": self.user_id,
            "model": model_name,
        }
        if generation_config:
            payload["options"] = {"generationConfig": generation_config}

        log_path = self._create_log(model_name, prompt, context)
        try:
            response = self.client.post(self.proxy_url, json={"data": payload})
        except httpx.TimeoutException as e:
            logger.error(f"⏱️ Timeout du proxy ({self.proxy_url})")
            self._append_response(log_path, "[TIMEOUT]")
            raise TransportError("Le modèle n'a pas répondu à temps.") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Proxy injoignable : {e}")
            self._append_response(log_path, "[CONNECTION ERROR]")
            raise TransportError() from e

        if response.status_code == 429:
            logger.warning(f"🚦 Limite de débit atteinte via le proxy ({model_name})")
            self._append_response(log_path, "[RATE LIMITED]")
            raise RateLimited()

        if not response.is_success:
            logger.error(f"❌ Erreur du proxy {response.status_code} : {response.text[:200]}")
            self._append_response(log_path, f"[ERREUR PROXY {response.status_code}]")
            raise TransportError(
                f"Erreur lors de la correction du texte (statut {response.status_code}).",
                status_code=response.status_code,
            )

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        response_text = extract_response_text(body)
        logger.info(f"✅ Requête via proxy réussie ({len(prompt)} chars)")
        self._append_response(log_path, response_text)
        return response_text
