"""
Passerelle directe vers Gemini via son endpoint compatible OpenAI.

Le client OpenAI est configuré sans retry interne (max_retries=0) :
le RetryController reste la seule politique de retry du système.
"""

from typing import Any, Optional

from openai import (
    OpenAI,
    OpenAIError,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    RateLimitError,
)
from openai.types.chat import ChatCompletionMessageParam

from ..config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, Settings
from ..exceptions import ConfigurationError, RateLimited, TransportError
from ..logger import get_logger
from .base import ModelGateway, wants_json

logger = get_logger(__name__)


class GeminiGateway(ModelGateway):
    """
    Appelle directement l'API du modèle avec la clé du processus.

    Example:
        >>> gateway = GeminiGateway(model_name="gemini-2.5-flash", api_key="...")
        >>> raw = gateway.invoke(prompt, generation_config=JSON_GENERATION_CONFIG)
    """

    def __init__(
        self,
        model_name: Optional[str],
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = 0.2,
        client: Optional[OpenAI] = None,
    ):
        super().__init__()
        if not api_key:
            raise ConfigurationError(
                "La clé API Gemini n'est pas configurée. Veuillez contacter l'administrateur."
            )
        if not model_name:
            raise ConfigurationError("Aucun modèle n'est configuré.")

        self.model_name = model_name
        self.temperature = temperature
        self.client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiGateway":
        return cls(
            model_name=settings.model_name,
            api_key=settings.require_api_key(),
            base_url=settings.base_url,
            timeout=settings.timeout,
        )

    def __repr__(self) -> str:
        return f"GeminiGateway(model_name={self.model_name!r})"

    def invoke(
        self,
        prompt: str,
        generation_config: Optional[dict[str, Any]] = None,
        context: Optional[str] = None,
    ) -> str:
        log_path = self._create_log(self.model_name, prompt, context)
        messages: list[ChatCompletionMessageParam] = [
            {"role": "user", "content": prompt},
        ]
        extra: dict[str, Any] = {}
        if wants_json(generation_config):
            extra["response_format"] = {"type": "json_object"}

        try:
            resp = self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=self.temperature,
                **extra,
            )
        except RateLimitError as e:
            logger.warning(f"🚦 Limite de débit atteinte ({self.model_name})")
            self._append_response(log_path, "[RATE LIMITED]")
            raise RateLimited(status_code=e.status_code) from e
        except APITimeoutError as e:
            logger.error(f"⏱️ Timeout API ({self.model_name})")
            self._append_response(log_path, "[TIMEOUT]")
            raise TransportError("Le modèle n'a pas répondu à temps.") from e
        except APIConnectionError as e:
            logger.error(f"❌ Connexion impossible au modèle : {e}")
            self._append_response(log_path, "[CONNECTION ERROR]")
            raise TransportError() from e
        except APIStatusError as e:
            logger.error(f"❌ Erreur API {e.status_code} : {e.message}")
            self._append_response(log_path, f"[ERREUR API {e.status_code}]")
            raise TransportError(
                f"Erreur lors de la correction du texte (statut {e.status_code}).",
                status_code=e.status_code,
            ) from e
        except OpenAIError as e:
            logger.error(f"❌ Erreur OpenAI générique : {e}")
            self._append_response(log_path, "[ERREUR OPENAI]")
            raise TransportError() from e

        content = resp.choices[0].message.content if resp.choices else None
        response_text = content or ""
        logger.info(f"✅ Requête LLM réussie ({len(prompt)} chars)")
        self._append_response(log_path, response_text)
        return response_text
