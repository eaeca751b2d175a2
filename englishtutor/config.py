"""Application configuration module."""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./englishtutor.db"
    SQL_ECHO: bool = False

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    # API settings
    PROJECT_NAME: str = "English Exam Practice"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Scoring oracle settings
    AI_PROVIDER: str = "rubric"  # "openai" or "rubric"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    OPENAI_MAX_TOKENS: int = 2000
    AI_TIMEOUT_SECONDS: float = 30.0

    # Speech-to-text settings
    GOOGLE_SPEECH_API_KEY: Optional[str] = None
    GOOGLE_SPEECH_API_BASE: str = "https://speech.googleapis.com/v1"
    SPEECH_LANGUAGE: str = "en-US"

    # Question selection settings
    RECENT_EXCLUSION_WINDOW: int = 10
    ADAPTIVE_WINDOW: int = 5
    ADAPTIVE_MIN_ATTEMPTS: int = 3


# Create global settings instance
settings = Settings()
