"""
Proxy serveur vers l'API REST de Gemini.

Le proxy détient la clé API : les clients n'envoient que le prompt.
Requêtes au format des fonctions appelables ({"data": {...}}) ou objet nu.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..config import DEFAULT_MODEL_NAME, Settings
from ..exceptions import ConfigurationError
from ..logger import get_logger
from ..model_config import ModelConfigService

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Credentials": "true",
}


def _json(status_code: int, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def _invalid_upstream_body(endpoint: str) -> JSONResponse:
    logger.error(f"❌ Réponse non JSON de l'API ({endpoint})")
    return _json(
        500,
        {"error": "Internal server error", "details": f"Invalid JSON from {endpoint}"},
    )


def transform_models(models_data: dict[str, Any]) -> dict[str, Any]:
    """Normalise la liste des modèles renvoyée par l'API avec des valeurs par défaut."""
    models = []
    for model in models_data.get("models") or []:
        name = model.get("name")
        models.append(
            {
                "name": name,
                "version": model.get("version") or "1.0",
                "displayName": model.get("displayName") or name,
                "description": model.get("description") or f"Model: {name}",
                "inputTokenLimit": model.get("inputTokenLimit") or 8192,
                "outputTokenLimit": model.get("outputTokenLimit") or 2048,
                "supportedGenerationMethods": model.get("supportedGenerationMethods")
                or ["generateContent"],
            }
        )
    return {"models": models}


def create_app(
    settings: Settings,
    config_service: Optional[ModelConfigService] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Construit l'application proxy.

    Args:
        settings: Réglages (clé API, URL REST, timeout)
        config_service: Source du modèle actif ; sans service, le modèle par défaut
        client: Client HTTP sortant (injectable pour les tests), fermé à l'arrêt de l'application
    """
    http = client or httpx.AsyncClient(timeout=settings.timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await http.aclose()

    app = FastAPI(title="french-corrector proxy", lifespan=lifespan)

    async def resolve_model(data: dict[str, Any], user_id: str) -> str:
        if data.get("model"):
            return data["model"]
        if config_service is not None:
            # Lecture fichier sous verrou : hors de la boucle d'événements
            return await run_in_threadpool(config_service.get_current_model_name, user_id)
        return settings.model_name or DEFAULT_MODEL_NAME

    @app.options("/geminiProxy")
    def preflight() -> Response:
        return Response(status_code=204, headers=CORS_HEADERS)

    @app.post("/geminiProxy")
    async def gemini_proxy(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return _json(400, {"error": "Invalid JSON payload"})
        if not isinstance(body, dict):
            return _json(400, {"error": "Invalid JSON payload"})

        data = body["data"] if isinstance(body.get("data"), dict) else body

        try:
            api_key = settings.require_api_key()

            if data.get("listModels"):
                models_res = await http.get(
                    f"{settings.rest_url}/models", headers={"x-goog-api-key": api_key}
                )
                if not models_res.is_success:
                    logger.error(f"❌ Liste des modèles indisponible : {models_res.status_code}")
                    return _json(
                        500,
                        {
                            "error": "Internal server error",
                            "details": f"Failed to list models: {models_res.status_code}",
                        },
                    )
                try:
                    models_data = models_res.json()
                except ValueError:
                    return _invalid_upstream_body("models")
                if not isinstance(models_data, dict):
                    return _invalid_upstream_body("models")
                return _json(200, {"data": transform_models(models_data)})

            prompt = data.get("prompt")
            if not prompt:
                return _json(400, {"error": "Prompt is required"})

            user_id = data.get("userId")
            if not user_id:
                return _json(400, {"error": "User ID is required"})

            model_name = await resolve_model(data, user_id)
            logger.info(f"🤖 Modèle {model_name} pour l'utilisateur {user_id}")

            upstream_body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
            options = data.get("options")
            if isinstance(options, dict):
                upstream_body.update(options)

            gemini_res = await http.post(
                f"{settings.rest_url}/models/{model_name}:generateContent",
                headers={"x-goog-api-key": api_key},
                json=upstream_body,
            )
        except ConfigurationError as e:
            logger.error(f"❌ Proxy mal configuré : {e}")
            return _json(500, {"error": "Internal server error", "details": e.user_message})
        except httpx.HTTPError as e:
            logger.error(f"❌ Appel à l'API impossible : {type(e).__name__}")
            return _json(
                500,
                {"error": "Internal server error", "details": type(e).__name__},
            )

        if not gemini_res.is_success:
            logger.error(f"❌ Erreur API Gemini {gemini_res.status_code}")
            return _json(
                gemini_res.status_code,
                {
                    "error": "Gemini API request failed",
                    "status": gemini_res.status_code,
                    "details": gemini_res.text,
                },
            )

        try:
            result = gemini_res.json()
        except ValueError:
            return _invalid_upstream_body("generateContent")
        return _json(200, {"data": result})

    return app
