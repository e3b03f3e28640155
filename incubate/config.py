"""
Application Configuration
=========================

Centralized configuration using Pydantic Settings.
Loads from environment variables with validation.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SENTIMENT_BACKENDS = ("keywords", "vader")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")

    # Database - embedded SQLite file
    DATA_DIR: Path = Field(
        default=Path.home() / ".local" / "share" / "incubate",
        description="App-private support directory holding the database file",
    )
    DATABASE_FILENAME: str = Field(default="db.sqlite")
    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement")

    # Journal
    LOCAL_USER_ID: str = Field(default="local-user")
    DEFAULT_FETCH_LIMIT: int = Field(default=1000, ge=1)
    DB_QUEUE_MAXSIZE: int = Field(
        default=64,
        ge=1,
        description="Pending storage requests before callers are made to wait",
    )

    # Analysis
    SENTIMENT_BACKEND: str = Field(default="keywords")
    NLTK_AUTO_DOWNLOAD: bool = Field(
        default=False,
        description="Fetch missing NLTK data (VADER lexicon, POS tagger) on first use",
    )
    INSIGHT_WINDOW_DAYS: int = Field(default=30, ge=1)

    # Daily reflection
    THINKING_DELAY_MIN_SECS: float = Field(default=1.0, ge=0)
    THINKING_DELAY_MAX_SECS: float = Field(default=3.0, ge=0)
    USE_DEMO_DATA_WHEN_EMPTY: bool = Field(default=True)
    PERSIST_COMPLETED_REFLECTIONS: bool = Field(default=True)

    # Profile
    PROFILE_FILENAME: str = Field(default="profile.json")
    USER_FIRST_NAME: str = Field(default="friend", min_length=1)

    @property
    def database_path(self) -> Path:
        """Absolute path of the SQLite database file."""
        return self.DATA_DIR.expanduser() / self.DATABASE_FILENAME

    @property
    def database_url_async(self) -> str:
        """SQLAlchemy URL for the aiosqlite driver."""
        return f"sqlite+aiosqlite:///{self.database_path}"

    @property
    def profile_path(self) -> Path:
        """Absolute path of the JSON profile document."""
        return self.DATA_DIR.expanduser() / self.PROFILE_FILENAME

    @field_validator("SENTIMENT_BACKEND")
    @classmethod
    def validate_sentiment_backend(cls, v: str) -> str:
        """Only the keyword counter and VADER are supported."""
        v = v.lower()
        if v not in SENTIMENT_BACKENDS:
            raise ValueError(
                f"SENTIMENT_BACKEND must be one of: {', '.join(SENTIMENT_BACKENDS)}"
            )
        return v

    @model_validator(mode="after")
    def validate_thinking_delays(self) -> "Settings":
        if self.THINKING_DELAY_MIN_SECS > self.THINKING_DELAY_MAX_SECS:
            raise ValueError(
                "THINKING_DELAY_MIN_SECS must not exceed THINKING_DELAY_MAX_SECS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
