"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True

    # Application
    APP_NAME: str = "Assessment Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Quiz Settings
    RESULT_CACHE_TTL: int = 3600  # 1 hour
    MAX_OPTIONS_PER_QUESTION: int = 10
    FOLDER_MAX_DEPTH: int = 64

    # Completion notifications
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None
    NOTIFICATION_TIMEOUT: float = 5.0

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
