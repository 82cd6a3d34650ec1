"""
Pipeline de correction d'un texte.

Flux : prompt → RetryController(passerelle + parser) → résultat normalisé
→ persistance (optionnelle).
"""

from typing import Optional

from ..gateway.base import JSON_GENERATION_CONFIG, ModelGateway
from ..llm.template_renderers import TemplateRenderer
from ..logger import get_logger
from ..models import CorrectionResult, StoredCorrection
from ..stores.correction_store import CorrectionStore
from .parser import parse_correction_response
from .retry import RetryController

logger = get_logger(__name__)


class CorrectionPipeline:
    """
    Orchestration d'une demande de correction.

    Les erreurs de la passerelle (après retry) et MalformedResponse sont
    propagées à l'appelant ; une réponse non-JSON est dégradée en texte brut.

    Example:
        >>> pipeline = CorrectionPipeline(gateway)
        >>> result = pipeline.correct("Je suis aller au marché hier.")
        >>> result.corrected_text
        'Je suis allé au marché hier.'
    """

    def __init__(
        self,
        gateway: ModelGateway,
        renderer: Optional[TemplateRenderer] = None,
        retry: Optional[RetryController] = None,
        store: Optional[CorrectionStore] = None,
    ):
        self.gateway = gateway
        self.renderer = renderer or TemplateRenderer()
        self.retry = retry or RetryController()
        self.store = store

    def correct(self, text: str) -> CorrectionResult:
        """
        Corrige un texte français.

        Args:
            text: Texte à corriger

        Returns:
            CorrectionResult ; résultat vide sans appel réseau si le texte est vide

        Raises:
            ConfigurationError, TransportError, MalformedResponse, RetriesExhausted
        """
        if not text.strip():
            logger.info("ℹ️ Texte vide, aucune requête envoyée")
            return CorrectionResult.empty()

        prompt = self.renderer.render_correction(text)

        def operation() -> CorrectionResult:
            raw = self.gateway.invoke(
                prompt,
                generation_config=JSON_GENERATION_CONFIG,
                context="correction",
            )
            return parse_correction_response(raw)

        result = self.retry.attempt(operation)
        logger.info(f"✅ Texte corrigé ({len(result.corrections)} correction(s))")
        return CorrectionResult(
            corrected_text=result.corrected_text.strip(),
            explanation=result.explanation.strip(),
            corrections=result.corrections,
        )

    def correct_and_save(
        self, text: str, user_id: str
    ) -> tuple[CorrectionResult, Optional[StoredCorrection]]:
        """
        Corrige puis enregistre le résultat dans l'historique.

        Rien n'est enregistré pour une entrée vide ou sans store configuré.
        Les erreurs de persistance sont propagées telles quelles, sans retry.
        """
        result = self.correct(text)
        if self.store is None or not text.strip():
            return result, None

        stored = self.store.save(
            user_id=user_id,
            original_text=text,
            corrected_text=result.corrected_text,
            corrections=result.corrections,
        )
        return result, stored
