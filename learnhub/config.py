"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./learnhub.db"

    # Gemini API (question drafting is disabled when unset)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"

    # Application
    APP_NAME: str = "LearnHub Core"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Sessions
    SESSION_COOKIE_NAME: str = "session"
    SESSION_TTL_DAYS: int = 30

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    # Points
    POINTS_QUIZ_PASS: int = 25
    POINTS_QUIZ_PERFECT: int = 50  # bonus on a 100% score
    LEADERBOARD_CACHE_TTL: int = 60  # seconds
    LEADERBOARD_MAX_LIMIT: int = 100

    # AI question drafting
    AI_MAX_CONTENT_CHARS: int = 8000
    AI_MIN_CONTENT_CHARS: int = 50

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
