"""
Construction des prompts à partir des templates Jinja2.

Les prompts sont déterministes : même entrée, même prompt, aucun effet de bord.
"""

import json
from pathlib import Path
from typing import Iterable, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..config import TemplateNames
from ..models import CorrectionItem, CorrectionType
from .template_params import CorrectionParams, StudyAdviceParams


TEMPLATE_DIR = Path(__file__).parent / "templates"


def quote_text(text: str) -> str:
    """
    Encode le texte utilisateur en chaîne JSON.

    Guillemets, retours à la ligne et antislashs sont échappés : le texte ne peut
    pas refermer la citation et se faire passer pour une instruction.
    """
    return json.dumps(text, ensure_ascii=False)


def format_correction_block(item: CorrectionItem) -> str:
    """Décrit une correction en quelques lignes pour le prompt d'agrégation."""
    lines = [
        f"Original : {item.original}",
        f"Corrigé : {item.corrected}",
        f"Explication : {item.explanation or item.short_explanation}",
    ]
    if item.type is not CorrectionType.OTHER:
        lines.append(f"Type : {item.type.value}")
    return "\n".join(lines)


class TemplateRenderer:
    """
    Encapsule le rendu des templates avec typage fort.

    Example:
        >>> renderer = TemplateRenderer()
        >>> prompt = renderer.render_correction("Je suis aller au marché.")
        >>> raw = gateway.invoke(prompt)
    """

    def __init__(self, prompt_dir: Optional[Union[str, Path]] = None):
        self.env = Environment(
            loader=FileSystemLoader(str(prompt_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
        )

    def render_prompt(self, template_name: str, **kwargs) -> str:
        """Rend un template Jinja2 avec les variables données."""
        template = self.env.get_template(template_name)
        return template.render(**kwargs)

    def render_correction(self, text: str) -> str:
        """
        Rend le prompt de correction d'un texte.

        Args:
            text: Texte à corriger, non vide après trim

        Returns:
            Prompt prêt à envoyer au modèle

        Raises:
            ValueError: Si le texte est vide ou ne contient que des espaces
        """
        if not text.strip():
            raise ValueError("Le texte à corriger est vide")

        params: CorrectionParams = {
            "quoted_text": quote_text(text),
            "correction_types": CorrectionType.values(),
        }
        return self.render_prompt(TemplateNames.Correction_Template, **params)

    def render_study_advice(self, items: Iterable[CorrectionItem]) -> str:
        """Rend le prompt d'agrégation des corrections passées en conseils d'étude."""
        params: StudyAdviceParams = {
            "correction_blocks": [format_correction_block(item) for item in items],
            "categories": CorrectionType.values(),
        }
        return self.render_prompt(TemplateNames.Study_Advice_Template, **params)
