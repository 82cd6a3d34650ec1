"""
Paramètres typés des templates Jinja2.

Un TypedDict par template, pour documenter et vérifier les variables attendues.
"""

from typing import TypedDict


class CorrectionParams(TypedDict):
    """
    Paramètres pour correction.jinja.

    Attributes:
        quoted_text: Texte de l'utilisateur encodé en chaîne JSON (guillemets échappés)
        correction_types: Valeurs autorisées pour le champ "type"
    """

    quoted_text: str
    correction_types: list[str]


class StudyAdviceParams(TypedDict):
    """
    Paramètres pour study_advice.jinja.

    Attributes:
        correction_blocks: Une description courte par correction (original/corrigé/explication)
        categories: Catégories proposées au modèle pour regrouper les erreurs
    """

    correction_blocks: list[str]
    categories: list[str]
