"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./journal.db"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True
    CONTENT_CACHE_TTL: int = 300  # 5 minutes

    # Application
    APP_NAME: str = "Journal Reader"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_PER_HOUR: int = 3000

    # Reading progress
    # "overwrite": store exactly what the reader sends (page 1 after finishing clears completed)
    # "monotonic": a completed section stays completed until explicitly reset
    PROGRESS_COMPLETION_POLICY: str = "overwrite"

    # Sessions
    SESSION_INACTIVITY_TIMEOUT_SECONDS: int = 15 * 60

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
