"""
Correcteur de textes français via un modèle génératif.

French Corrector envoie un texte au modèle (Gemini), récupère une réponse JSON
semi-structurée et la transforme en résultat normalisé : texte corrigé,
explication et liste de corrections classées.

Le processus de correction :
1. Construit le prompt (template Jinja2, texte encodé en chaîne JSON)
2. Appelle le modèle via une passerelle (directe ou via le proxy serveur)
3. Réessaie avec backoff exponentiel en cas de limite de débit (429)
4. Parse la réponse (bloc ```json``` toléré, repli sur le texte brut)
5. Classe chaque correction dans la taxonomie fermée
6. Enregistre le résultat dans l'historique de l'utilisateur

Organisation du package :
- config.py : Réglages (.env) et configuration statique verrouillable
- logger.py : Logs par session d'exécution
- models.py : Objets valeur (CorrectionResult, StudyAdvice, ...)
- llm/ : Templates de prompts
- gateway/ : Passerelles vers le modèle
- correction/ : Retry, parsing, classification, pipeline, conseils d'étude
- stores/ : Persistance JSON sur disque
- proxy/ : Proxy serveur FastAPI qui cache la clé API

Usage minimal :
    >>> from french_corrector import CorrectionPipeline, GeminiGateway, load_settings
    >>>
    >>> gateway = GeminiGateway.from_settings(load_settings())
    >>> result = CorrectionPipeline(gateway).correct("Je suis aller au marché.")
    >>> for item in result.corrections:
    ...     print(item.type.value, item.original, "→", item.corrected)

Configuration :
    GEMINI_API_KEY=votre-cle
    GEMINI_MODEL=gemini-2.5-flash
    CORRECTOR_PROXY_URL=http://localhost:8080/geminiProxy  (optionnel)

Version: 0.1.0
"""

from .config import Settings, load_settings
from .correction import (
    CorrectionPipeline,
    RetryController,
    StudyAdvisor,
    classify_correction,
    parse_correction_response,
)
from .exceptions import (
    ConfigurationError,
    CorrectorError,
    MalformedResponse,
    RateLimited,
    RetriesExhausted,
    TransportError,
)
from .gateway import GeminiGateway, ModelGateway, ProxyGateway
from .llm import TemplateRenderer
from .model_config import ModelConfigService, ModelNameCache
from .models import (
    AdviceCategory,
    AdviceExample,
    CorrectionItem,
    CorrectionResult,
    CorrectionType,
    StoredCorrection,
    StudyAdvice,
)
from .stores import ConfigStore, CorrectionStore

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "load_settings",
    # Pipeline
    "CorrectionPipeline",
    "RetryController",
    "StudyAdvisor",
    "TemplateRenderer",
    "classify_correction",
    "parse_correction_response",
    # Passerelles
    "ModelGateway",
    "GeminiGateway",
    "ProxyGateway",
    "ModelConfigService",
    "ModelNameCache",
    # Persistance
    "ConfigStore",
    "CorrectionStore",
    # Modèles
    "AdviceCategory",
    "AdviceExample",
    "CorrectionItem",
    "CorrectionResult",
    "CorrectionType",
    "StoredCorrection",
    "StudyAdvice",
    # Erreurs
    "CorrectorError",
    "ConfigurationError",
    "RateLimited",
    "TransportError",
    "MalformedResponse",
    "RetriesExhausted",
]
