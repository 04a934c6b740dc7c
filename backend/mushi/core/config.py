# mushi/core/config.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "dev"

    # Database
    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "mushi"

    # Session tokens (issued by the auth provider)
    JWT_SECRET_KEY: str = "dev-secret"
    ALGORITHM: str = "HS256"

    # Object storage
    STORAGE_BACKEND: str = "s3"  # "s3" | "b2"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "eu-central-1"
    B2_KEY_ID: Optional[str] = None
    B2_APPLICATION_KEY: Optional[str] = None
    BUCKET_PUBLIC: bool = True
    TEMPLATES_BUCKET: str = "templates"
    AVATARS_BUCKET: str = "avatars"
    PLACEHOLDER_IMAGE_URL: str = "/mushi-logo.png"

    # Gallery
    PAGE_SIZE: int = Field(default=20, ge=1)
    REVEAL_DEBOUNCE_SECONDS: float = Field(default=0.5, ge=0)
    LOCAL_CACHE_PATH: str = ".mushi_cache.json"

    # Logging
    LOG_DIR: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
