"""
Tests pour les passerelles vers le modèle (directe et proxy).
"""

import json
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from french_corrector.exceptions import (
    ConfigurationError,
    MalformedResponse,
    RateLimited,
    TransportError,
)
from french_corrector.gateway import (
    JSON_GENERATION_CONFIG,
    GeminiGateway,
    ProxyGateway,
    extract_response_text,
)
from french_corrector.logger import LogSession
from french_corrector.model_config import ModelConfigService, ModelNameCache
from french_corrector.stores import ConfigStore


API_KEY = "test-secret-key"
REQUEST = httpx.Request("POST", "https://example.test/chat/completions")


def completion(content):
    resp = MagicMock()
    resp.choices = [MagicMock()]
    resp.choices[0].message.content = content
    return resp


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create.return_value = completion('{"correctedText": "ok"}')
    return client


@pytest.fixture
def gemini(openai_client):
    return GeminiGateway(model_name="gemini-test", api_key=API_KEY, client=openai_client)


class TestGeminiGateway:
    """Tests pour la passerelle directe (client OpenAI mocké)."""

    def test_returns_raw_text(self, gemini, openai_client):
        assert gemini.invoke("prompt") == '{"correctedText": "ok"}'

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert "response_format" not in kwargs

    def test_json_mode(self, gemini, openai_client):
        gemini.invoke("prompt", generation_config=JSON_GENERATION_CONFIG)

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_empty_completion(self, gemini, openai_client):
        openai_client.chat.completions.create.return_value = completion(None)
        assert gemini.invoke("prompt") == ""

    def test_rate_limit(self, gemini, openai_client):
        openai_client.chat.completions.create.side_effect = openai.RateLimitError(
            "quota", response=httpx.Response(429, request=REQUEST), body=None
        )

        with pytest.raises(RateLimited) as exc_info:
            gemini.invoke("prompt")
        assert exc_info.value.status_code == 429

    def test_server_error(self, gemini, openai_client):
        openai_client.chat.completions.create.side_effect = openai.InternalServerError(
            "boom", response=httpx.Response(503, request=REQUEST), body=None
        )

        with pytest.raises(TransportError) as exc_info:
            gemini.invoke("prompt")
        assert exc_info.value.status_code == 503

    @pytest.mark.parametrize(
        "error",
        [openai.APITimeoutError(request=REQUEST), openai.APIConnectionError(request=REQUEST)],
    )
    def test_network_errors(self, gemini, openai_client, error):
        openai_client.chat.completions.create.side_effect = error

        with pytest.raises(TransportError):
            gemini.invoke("prompt")

    @pytest.mark.parametrize("api_key,model", [(None, "m"), ("", "m"), ("k", None), ("k", "")])
    def test_missing_configuration(self, api_key, model):
        with pytest.raises(ConfigurationError):
            GeminiGateway(model_name=model, api_key=api_key, client=MagicMock())

    def test_key_never_logged(self, gemini):
        gemini.invoke("prompt", context="correction")

        logs = list(LogSession.get_session_dir().glob("llm_correction_*.log"))
        assert len(logs) == 1
        content = logs[0].read_text(encoding="utf-8")
        assert "prompt" in content
        assert API_KEY not in content
        assert API_KEY not in repr(gemini)


class TestExtractResponseText:
    """Tests pour la normalisation des réponses en texte brut."""

    def test_plain_string(self):
        assert extract_response_text("bonjour") == "bonjour"

    def test_candidates_path(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
        assert extract_response_text(payload) == "ab"

    def test_callable_wrapper(self):
        payload = {"data": {"candidates": [{"content": {"parts": [{"text": "x"}]}}]}}
        assert extract_response_text(payload) == "x"

    def test_text_field(self):
        assert extract_response_text({"text": "y"}) == "y"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"candidates": []}, {"candidates": [{"content": {"parts": []}}]}, None, 12],
    )
    def test_no_text(self, payload):
        with pytest.raises(MalformedResponse):
            extract_response_text(payload)


def gemini_body(text):
    return {"data": {"candidates": [{"content": {"parts": [{"text": text}]}}]}}


@pytest.fixture
def config_service(data_dir):
    return ModelConfigService(ConfigStore(data_dir), ModelNameCache())


def make_proxy(config_service, handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ProxyGateway(
        "https://proxy.test/geminiProxy", config_service, user_id="uid-1", client=client
    )


class TestProxyGateway:
    """Tests pour la passerelle via proxy (transport httpx mocké)."""

    def test_request_and_response(self, config_service):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=gemini_body('{"correctedText": "ok"}'))

        gateway = make_proxy(config_service, handler)
        config_service.update_model_config("gemini-pro-test", "admin")

        raw = gateway.invoke("prompt", generation_config=JSON_GENERATION_CONFIG)

        assert raw == '{"correctedText": "ok"}'
        data = seen[0]["data"]
        assert data["prompt"] == "prompt"
        assert data["userId"] == "uid-1"
        assert data["model"] == "gemini-pro-test"
        assert data["options"] == {"generationConfig": JSON_GENERATION_CONFIG}

    def test_plain_text_body(self, config_service):
        gateway = make_proxy(config_service, lambda request: httpx.Response(200, text="brut"))
        assert gateway.invoke("prompt") == "brut"

    def test_rate_limit(self, config_service):
        gateway = make_proxy(config_service, lambda request: httpx.Response(429, json={}))
        with pytest.raises(RateLimited):
            gateway.invoke("prompt")

    def test_http_error(self, config_service):
        gateway = make_proxy(
            config_service, lambda request: httpx.Response(500, json={"error": "x"})
        )
        with pytest.raises(TransportError) as exc_info:
            gateway.invoke("prompt")
        assert exc_info.value.status_code == 500

    def test_network_error(self, config_service):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        gateway = make_proxy(config_service, handler)
        with pytest.raises(TransportError):
            gateway.invoke("prompt")

    def test_body_without_text(self, config_service):
        gateway = make_proxy(config_service, lambda request: httpx.Response(200, json={"data": {}}))
        with pytest.raises(MalformedResponse):
            gateway.invoke("prompt")

    def test_model_cache_is_stale_until_invalidated(self, config_service):
        models = []

        def handler(request):
            models.append(json.loads(request.content)["data"]["model"])
            return httpx.Response(200, text="ok")

        gateway = make_proxy(config_service, handler)
        gateway.invoke("p")

        # Écriture directe dans le store : le cache n'est pas prévenu
        config_service.store.set("gemini_model", {"modelName": "autre-modele"})
        gateway.invoke("p")

        config_service.cache.invalidate()
        gateway.invoke("p")

        assert models[0] == models[1] != "autre-modele"
        assert models[2] == "autre-modele"

    def test_missing_url(self, config_service):
        with pytest.raises(ConfigurationError):
            ProxyGateway(None, config_service, user_id="uid-1", client=MagicMock())
