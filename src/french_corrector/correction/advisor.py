"""
Conseils d'étude à partir de l'historique des corrections.

Fonctionnalité secondaire : `summarize` renvoie toujours un StudyAdvice,
y compris en cas d'échec de la passerelle ou de réponse illisible.
"""

from typing import Iterable, Optional, Sequence

from ..exceptions import CorrectorError, MalformedResponse
from ..gateway.base import JSON_GENERATION_CONFIG, ModelGateway
from ..llm.template_renderers import TemplateRenderer
from ..logger import get_logger
from ..models import (
    AdviceCategory,
    CorrectionItem,
    CorrectionType,
    StoredCorrection,
    StudyAdvice,
)
from .parser import parse_study_advice
from .retry import RetryController

logger = get_logger(__name__)

NOTHING_TO_ANALYZE = "Aucune correction à analyser."
RAW_ADVICE_SUMMARY = "Voici les conseils de l'IA (format non structuré)."
TECHNICAL_ERROR_SUMMARY = (
    "Une erreur technique est survenue lors de l'analyse de vos corrections."
)


def collect_items(
    history: Iterable[StoredCorrection], limit: Optional[int] = None
) -> list[CorrectionItem]:
    """
    Aplatit les corrections détaillées d'un historique.

    Args:
        history: Corrections persistées, de la plus récente à la plus ancienne
        limit: Nombre maximal de corrections détaillées à garder (None = toutes)
    """
    items = [item for stored in history for item in stored.corrections]
    return items if limit is None else items[:limit]


class StudyAdvisor:
    """
    Agrège des corrections passées en conseils d'étude par schéma d'erreur.

    Example:
        >>> advisor = StudyAdvisor(gateway)
        >>> advice = advisor.summarize(collect_items(store.list(user_id)))
        >>> print(advice.summary)
    """

    def __init__(
        self,
        gateway: ModelGateway,
        renderer: Optional[TemplateRenderer] = None,
        retry: Optional[RetryController] = None,
    ):
        self.gateway = gateway
        self.renderer = renderer or TemplateRenderer()
        self.retry = retry or RetryController()

    def summarize(self, items: Sequence[CorrectionItem]) -> StudyAdvice:
        """
        Produit un StudyAdvice ; ne lève jamais d'exception.

        - Aucune correction : conseil fixe, aucun appel au modèle
        - Réponse illisible : une seule entrée contenant le texte brut
        - Échec de la passerelle : une seule entrée décrivant l'erreur technique
        """
        if not items:
            return StudyAdvice(summary=NOTHING_TO_ANALYZE, corrections=())

        try:
            prompt = self.renderer.render_study_advice(items)
            raw = self.retry.attempt(
                lambda: self.gateway.invoke(
                    prompt,
                    generation_config=JSON_GENERATION_CONFIG,
                    context="study_advice",
                )
            )
        except Exception as e:
            logger.error(f"❌ Conseils d'étude indisponibles : {e!r}")
            return _technical_error_advice(e)

        try:
            advice = parse_study_advice(raw)
        except MalformedResponse as e:
            logger.warning(f"⚠️ Réponse de conseils non structurée : {e}")
            return _raw_text_advice(raw)

        logger.info(f"✅ Conseils d'étude générés ({len(advice.corrections)} schéma(s))")
        return advice


def _raw_text_advice(raw: str) -> StudyAdvice:
    return StudyAdvice(
        summary=RAW_ADVICE_SUMMARY,
        corrections=(
            AdviceCategory(
                category=CorrectionType.OTHER.value,
                title="Conseils d'étude",
                content=raw.strip(),
            ),
        ),
    )


def _technical_error_advice(error: Exception) -> StudyAdvice:
    detail = (
        error.user_message
        if isinstance(error, CorrectorError)
        else "Le service est momentanément indisponible."
    )
    return StudyAdvice(
        summary=TECHNICAL_ERROR_SUMMARY,
        corrections=(
            AdviceCategory(
                category=CorrectionType.OTHER.value,
                title="Erreur technique",
                content=f"{detail} Veuillez réessayer plus tard.",
            ),
        ),
    )
