import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.deps import get_llm_gateway
from app.main import create_app
from app.services.llm_gateway import LlmError


class FakeLlm:
    """
    Remplace LlmGateway : renvoie des réponses préparées, mémorise les prompts.
    Une Exception placée dans la file est levée au lieu d'être renvoyée.
    """

    def __init__(self):
        self.replies = []
        self.media_replies = []
        self.prompts = []
        self.media_calls = []

    def _next(self, queue):
        if not queue:
            raise LlmError("no prepared reply")
        reply = queue.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._next(self.replies)

    def complete_with_media(self, prompt: str, media_b64: str, mime_type: str = "image/jpeg") -> str:
        self.media_calls.append((prompt, media_b64, mime_type))
        return self._next(self.media_replies)


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "storage"


@pytest.fixture
def client_factory(tmp_path, storage_path, monkeypatch, fake_llm):
    """
    Crée un TestClient avec un STORAGE_PATH et une base SQLite temporaires (isolés),
    et force quelques variables d'env pour les tests.
    """

    def _make(**env):
        monkeypatch.setenv("APP_ENV", "test")
        monkeypatch.setenv("APP_NAME", "StudyAI API (tests)")
        monkeypatch.setenv("STORAGE_PATH", str(storage_path))
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
        monkeypatch.setenv("MAX_UPLOAD_MB", "1")  # limite faible pour tests
        monkeypatch.setenv("PREVIEW_MAX_CHARS", "5000")
        monkeypatch.setenv("CORS_ORIGINS", "http://localhost")
        monkeypatch.setenv("ENABLE_VIDEO_ANALYSIS", "false")
        for key, value in env.items():
            monkeypatch.setenv(key, value)

        # IMPORTANT: vider le cache des settings pour prendre en compte les env
        get_settings.cache_clear()

        app = create_app()
        app.dependency_overrides[get_llm_gateway] = lambda: fake_llm
        return TestClient(app)

    yield _make
    get_settings.cache_clear()


@pytest.fixture
def test_client(client_factory):
    return client_factory()
