"""Construction des prompts envoyés au modèle."""

from .template_renderers import TemplateRenderer, format_correction_block, quote_text

__all__ = ["TemplateRenderer", "format_correction_block", "quote_text"]
