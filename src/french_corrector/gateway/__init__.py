"""
Passerelles vers le modèle génératif.

- GeminiGateway : appel direct (clé API locale)
- ProxyGateway : appel via le proxy serveur (clé API cachée côté serveur)
"""

from .base import JSON_GENERATION_CONFIG, ModelGateway, extract_response_text
from .gemini import GeminiGateway
from .proxy import ProxyGateway

__all__ = [
    "JSON_GENERATION_CONFIG",
    "ModelGateway",
    "extract_response_text",
    "GeminiGateway",
    "ProxyGateway",
]
