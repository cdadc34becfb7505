from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Base
    APP_ENV: str = "dev"  # dev | staging | prod
    APP_NAME: str = "StudyAI API"
    APP_VERSION: str = "0.1.0"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Database
    DATABASE_URL: str = "sqlite:///./data/studyai.db"

    # Storage
    STORAGE_PATH: str = "./data/materials"
    MAX_UPLOAD_MB: int = 50
    PREVIEW_MAX_CHARS: int = 5000

    # Ollama
    OLLAMA_HOST: str = "http://localhost:11434"
    OLLAMA_API_KEY: str = "ollama"  # ignoré par Ollama, requis par le client openai
    OLLAMA_MODEL: str = "llama3.1:8b"
    OLLAMA_VISION_MODEL: str = "llava"
    ENABLE_VIDEO_ANALYSIS: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
