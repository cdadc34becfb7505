from app.core.config import get_settings
from app.services.llm_gateway import LlmGateway
from app.services.storage import StorageService


def get_settings_dep():
    return get_settings()


def get_storage_service() -> StorageService:
    """
    Fournit le service de stockage en dépendance (DI).
    """
    settings = get_settings()
    return StorageService(
        base_path=settings.STORAGE_PATH,
        max_upload_mb=settings.MAX_UPLOAD_MB,
        preview_max_chars=settings.PREVIEW_MAX_CHARS,
    )


def get_llm_gateway() -> LlmGateway:
    """
    Passerelle Ollama (remplacée par un faux dans les tests).
    """
    return LlmGateway.from_settings(get_settings())
