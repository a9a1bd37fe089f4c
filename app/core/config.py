"""
Application Configuration - Environment-driven settings
"""

from functools import lru_cache
from typing import List, Optional
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "change-me-in-production"

class Settings(BaseSettings):
    """
    All runtime configuration, read from environment variables or a local .env file.
    Field names match the environment variable names exactly.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)

    # Application
    APP_NAME: str = "Task Manager API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | production | test
    DEBUG: bool = False
    PORT: int = 5000

    # Database - DATABASE_URL wins when set, otherwise built from DB_* parts
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "taskmanager"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "password"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_CONNECT_RETRIES: int = 5  # Startup connectivity attempts before giving up
    DB_CONNECT_RETRY_DELAY: float = 5.0  # Seconds between startup attempts
    SEED_DEFAULT_USERS: bool = True

    # CORS - comma separated list of allowed origins
    CORS_ORIGINS: str = "*"

    # Authentication
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB per file
    MAX_DOCUMENTS_PER_TASK: int = 3

    @property
    def cors_origins(self) -> List[str]:
        """CORS_ORIGINS=http://a,http://b -> ["http://a", "http://b"]"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - environment is read once per process"""
    return Settings()

settings = get_settings()

def validate_config(config: Optional[Settings] = None) -> None:
    """
    Fail fast on settings that are unsafe or unusable.
    Raises ValueError describing the first problem found.
    """
    config = config or settings
    if config.is_production and config.SECRET_KEY == DEFAULT_SECRET_KEY:
        raise ValueError("SECRET_KEY must be set in production")
    if config.MAX_DOCUMENTS_PER_TASK < 1:
        raise ValueError("MAX_DOCUMENTS_PER_TASK must be at least 1")
    if config.MAX_UPLOAD_SIZE < 1:
        raise ValueError("MAX_UPLOAD_SIZE must be positive")
    if config.DB_CONNECT_RETRIES < 1:
        raise ValueError("DB_CONNECT_RETRIES must be at least 1")
    logger.debug("✅ Configuration validated")
