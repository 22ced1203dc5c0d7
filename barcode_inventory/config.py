"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    ENV: str = "dev"

    # Document store; in-memory when no URI is given
    MONGODB_URI: Optional[str] = None
    MONGODB_DB: str = "barcode_inventory"

    # Upstream product-data source
    UPSTREAM_API_URL: Optional[str] = None
    UPSTREAM_TIMEOUT: float = 10.0

    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Client side (sdk / cli)
    API_BASE_URL: str = "http://127.0.0.1:8085"
    API_TIMEOUT: int = 10
    SCAN_STRATEGY: str = "ocr"
    OCR_LANG: str = "eng"

    HOST: str = "0.0.0.0"
    PORT: int = 8085

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
