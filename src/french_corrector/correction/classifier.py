"""
Classification des corrections renvoyées par le modèle.

La sortie du modèle n'est pas fiable : `classify_correction` accepte
n'importe quelle valeur et ne lève jamais d'exception.
"""

from typing import Any

from ..models import CorrectionItem, CorrectionType


_TYPES_BY_VALUE = {member.value: member for member in CorrectionType}


def resolve_type(raw_type: Any) -> CorrectionType:
    """
    Résout la catégorie d'une correction.

    Seule une correspondance exacte avec un membre de la taxonomie est acceptée,
    tout le reste (absent, inconnu, mauvaise casse, non-string) devient OTHER.

    Example:
        >>> resolve_type("Grammar")
        <CorrectionType.GRAMMAR: 'Grammar'>
        >>> resolve_type("grammar")
        <CorrectionType.OTHER: 'Other'>
    """
    if isinstance(raw_type, CorrectionType):
        return raw_type
    if isinstance(raw_type, str):
        return _TYPES_BY_VALUE.get(raw_type, CorrectionType.OTHER)
    return CorrectionType.OTHER


def _text_field(raw_item: dict, key: str) -> str:
    value = raw_item.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def classify_correction(raw_item: Any) -> CorrectionItem:
    """
    Convertit une entrée brute du tableau `corrections` en CorrectionItem.

    Les champs narratifs absents valent "" ; une entrée qui n'est pas un objet
    donne un CorrectionItem vide de type OTHER.

    Args:
        raw_item: Entrée brute (normalement un dict issu du JSON du modèle)

    Returns:
        CorrectionItem normalisé
    """
    if not isinstance(raw_item, dict):
        return CorrectionItem()

    return CorrectionItem(
        original=_text_field(raw_item, "original"),
        corrected=_text_field(raw_item, "corrected"),
        short_explanation=_text_field(raw_item, "shortExplanation"),
        explanation=_text_field(raw_item, "explanation"),
        type=resolve_type(raw_item.get("type")),
    )
