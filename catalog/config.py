from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (or a .env file).
    """
    APP_NAME: str = "Clothing Catalog API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Document store
    MONGO_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "catalog"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    # MongoDB rejects BSON documents above 16 MiB
    MAX_DOCUMENT_BYTES: int = 16 * 1024 * 1024

    # Cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL: int = 300
    CACHE_ENABLED: bool = True

    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
