"""
Application settings.

Loaded from environment variables prefixed with PRODUCTAPI_ (and an optional
.env file), e.g. PRODUCTAPI_API_KEY, PRODUCTAPI_ENVIRONMENT.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Development fallback only. Never rely on it in production: set
# PRODUCTAPI_API_KEY instead.
DEFAULT_API_KEY = "your-secret-api-key"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PRODUCTAPI_", env_file=".env", extra="ignore")

    api_key: str = DEFAULT_API_KEY
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 8085
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @property
    def debug(self) -> bool:
        """Development mode: 500 responses include the formatted traceback."""
        return self.environment.lower() == "development"

    @property
    def using_default_api_key(self) -> bool:
        return self.api_key == DEFAULT_API_KEY


@lru_cache()
def get_settings() -> Settings:
    return Settings()
