"""
Application settings loaded from environment variables (and `.env`).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the Task Board API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App
    APP_NAME: str = "Task Board API"
    APP_VERSION: str = "1.0.0"
    MODE: str = "debug"  # 'debug', 'test' or 'production'
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./taskboard.db"
    DB_TIMEOUT_SECONDS: float = 5.0

    # Redis (token revocation)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Auth
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Logging / monitoring
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1
    REQUEST_LOGGING_ENABLED: bool = True
    SLOW_REQUEST_MS: int = 1000

    # Workflow
    TASK_STATUSES: List[str] = ["backlog", "todo", "in_progress", "done"]
    DEFAULT_TASK_STATUS: str = "backlog"
    TEAM_CODE_LENGTH: int = 6
    TEAM_CODE_MAX_ATTEMPTS: int = 20


settings = Settings()
