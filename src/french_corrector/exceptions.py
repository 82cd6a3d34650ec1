"""
Exceptions du pipeline de correction.

Chaque exception porte un message lisible (`user_message`) destiné à être
affiché tel quel à l'utilisateur.
"""

from typing import Optional


class CorrectorError(Exception):
    """Base de toutes les erreurs du correcteur."""

    default_message = "Une erreur est survenue lors de la correction."

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(CorrectorError):
    """Clé API ou identifiant de modèle introuvable. Fatale, jamais réessayée."""

    default_message = "La configuration du modèle est incomplète."


class RateLimited(CorrectorError):
    """Le service a répondu 429 : erreur transitoire, réessayée par le RetryController."""

    default_message = "Trop de requêtes envoyées au modèle."

    def __init__(self, message: Optional[str] = None, status_code: int = 429):
        self.status_code = status_code
        super().__init__(message)


class TransportError(CorrectorError):
    """
    Échec réseau ou statut HTTP autre que 429.

    Attributes:
        status_code: Statut HTTP de la réponse si connu, None sinon
    """

    default_message = "Impossible de joindre le modèle. Veuillez réessayer plus tard."

    def __init__(
        self, message: Optional[str] = None, status_code: Optional[int] = None
    ):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(CorrectorError):
    """
    La réponse du modèle est un JSON valide mais sans les champs obligatoires.

    Attributes:
        raw_preview: Aperçu (200 caractères max) de la réponse brute
    """

    default_message = "La réponse de l'IA n'a pas le format attendu."

    def __init__(self, message: Optional[str] = None, raw_text: str = ""):
        self.raw_preview = raw_text[:200] + "..." if len(raw_text) > 200 else raw_text
        super().__init__(message)


class RetriesExhausted(CorrectorError):
    """
    La limite de débit a persisté au-delà du budget de tentatives.

    Attributes:
        attempts: Nombre d'appels effectués avant abandon
    """

    default_message = "Échec après plusieurs tentatives. Veuillez réessayer plus tard."

    def __init__(self, attempts: int, message: Optional[str] = None):
        self.attempts = attempts
        super().__init__(message)

    def __repr__(self) -> str:
        return f"RetriesExhausted(attempts={self.attempts})"
