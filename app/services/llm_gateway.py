import logging
from typing import Any

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)


class LlmError(RuntimeError):
    """Échec d'appel au serveur d'inférence (injoignable, modèle absent...)."""


class LlmGateway:
    """
    Passerelle vers Ollama via son endpoint compatible OpenAI (<host>/v1).
    - complete()            : chat texte, un seul message role=user
    - complete_with_media() : modèle vision, image/vidéo inline en base64
    Pas de retry, pas de streaming.
    """

    def __init__(self, client: Any, model: str = "llama3.1:8b", vision_model: str = "llava"):
        self.client = client
        self.model = model
        self.vision_model = vision_model

    @classmethod
    def from_settings(cls, settings) -> "LlmGateway":
        client = OpenAI(
            base_url=settings.OLLAMA_HOST.rstrip("/") + "/v1",
            api_key=settings.OLLAMA_API_KEY,
            max_retries=0,
        )
        return cls(client, model=settings.OLLAMA_MODEL, vision_model=settings.OLLAMA_VISION_MODEL)

    def complete(self, prompt: str) -> str:
        logger.info("Calling Ollama model %s", self.model)
        return self._chat(self.model, [{"role": "user", "content": prompt}])

    def complete_with_media(self, prompt: str, media_b64: str, mime_type: str = "image/jpeg") -> str:
        logger.info("Calling Ollama vision model %s (%s)", self.vision_model, mime_type)
        content = [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{media_b64}"}},
        ]
        return self._chat(self.vision_model, [{"role": "user", "content": content}])

    def _chat(self, model: str, messages: list) -> str:
        try:
            comp = self.client.chat.completions.create(model=model, messages=messages)
            text = comp.choices[0].message.content or ""
        except OpenAIError as e:
            raise LlmError(f"Ollama call failed ({model}): {e}") from e
        except (AttributeError, IndexError) as e:
            raise LlmError(f"Unexpected Ollama response ({model}): {e}") from e

        logger.debug("Ollama raw response: %s", text)
        return text.strip()
