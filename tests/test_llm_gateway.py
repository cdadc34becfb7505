from types import SimpleNamespace

import httpx
import openai
import pytest

from app.core.config import Settings
from app.services.llm_gateway import LlmError, LlmGateway


class _Completions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_complete_sends_single_user_message():
    completions = _Completions(content='  {"ok": true}\n')
    gateway = LlmGateway(_client(completions), model="llama3.1:8b")

    assert gateway.complete("Say hi") == '{"ok": true}'
    call = completions.calls[0]
    assert call["model"] == "llama3.1:8b"
    assert call["messages"] == [{"role": "user", "content": "Say hi"}]


def test_complete_with_media_uses_vision_model_and_data_url():
    completions = _Completions(content="{}")
    gateway = LlmGateway(_client(completions), model="llama3.1:8b", vision_model="llava")

    gateway.complete_with_media("Describe", "QUJD", "video/webm")
    call = completions.calls[0]
    assert call["model"] == "llava"
    content = call["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "Describe"}
    assert content[1]["image_url"]["url"] == "data:video/webm;base64,QUJD"


def test_client_error_becomes_llm_error():
    request = httpx.Request("POST", "http://localhost:11434/v1/chat/completions")
    completions = _Completions(error=openai.APIConnectionError(request=request))
    gateway = LlmGateway(_client(completions))

    with pytest.raises(LlmError):
        gateway.complete("hello")


def test_empty_choices_becomes_llm_error():
    class _Empty(_Completions):
        def create(self, **kwargs):
            return SimpleNamespace(choices=[])

    gateway = LlmGateway(_client(_Empty()))
    with pytest.raises(LlmError):
        gateway.complete("hello")


def test_none_content_is_empty_string():
    gateway = LlmGateway(_client(_Completions(content=None)))
    assert gateway.complete("hello") == ""


def test_from_settings_points_at_ollama_openai_endpoint():
    settings = Settings(OLLAMA_HOST="http://ollama:11434/", OLLAMA_MODEL="mistral", OLLAMA_VISION_MODEL="bakllava")
    gateway = LlmGateway.from_settings(settings)
    assert gateway.model == "mistral"
    assert gateway.vision_model == "bakllava"
    assert str(gateway.client.base_url).rstrip("/") == "http://ollama:11434/v1"
