"""
Engine configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Splitsync"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    DEFAULT_CURRENCY: str = "USD"

    # Local store
    DATABASE_URL: str = "sqlite:///./splitsync.db"
    DB_ECHO: bool = False

    # Remote store
    REMOTE_API_URL: str = "http://localhost:8000/api"
    REMOTE_API_TOKEN: str = ""  # Sent as a bearer token when set

    # Retry / circuit breaker
    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_BASE_DELAY_SECONDS: float = 1.0
    OPERATION_TIMEOUT_SECONDS: float = 30.0  # Per attempt
    CIRCUIT_BREAKER_THRESHOLD: int = 5  # Consecutive exhausted calls before opening
    CIRCUIT_BREAKER_TIMEOUT_SECONDS: float = 300.0  # 5 minutes

    # Sync
    MAX_OPERATION_RETRIES: int = 3  # Drain failures before a queued operation is dropped
    MAX_DROPPED_OPERATIONS: int = 100  # Oldest lost operations are forgotten beyond this
    SYNC_MAX_CONCURRENT_FETCHES: int = 3
    SYNC_INTERVAL_SECONDS: float = 60.0

    # Deduplication
    GROUP_DEDUP_CREATE_THRESHOLD: float = 0.75
    GROUP_DEDUP_LIST_THRESHOLD: float = 0.8
    EXPENSE_DEDUP_WINDOW_SECONDS: float = 300.0

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("MAX_DROPPED_OPERATIONS")
    @classmethod
    def positive_dropped_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_DROPPED_OPERATIONS must be at least 1")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
