"""Configuration management for Inbox AI.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REDIRECT_BASE = "http://localhost:5000"


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the INBOX_AI_ prefix (e.g., INBOX_AI_GEMINI_API_KEY).
    """

    model_config = SettingsConfigDict(
        env_prefix="INBOX_AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google OAuth Configuration
    google_client_id: str | None = Field(
        default=None,
        description="OAuth client ID for the Google web application",
    )
    google_client_secret: str | None = Field(
        default=None,
        description="OAuth client secret for the Google web application",
    )
    app_url: str | None = Field(
        default=None,
        description="Public base URL of the app; used to build the OAuth redirect URI",
    )

    # Gmail Configuration
    gmail_user_id: str = Field(default="me", description="Gmail user id")
    gmail_sync_limit: int = Field(
        default=20,
        description="Number of recent messages fetched per email sync",
    )
    email_body_max_chars: int = Field(
        default=5000,
        description="Email bodies are truncated to this many characters before storage",
    )

    # Calendar Configuration
    calendar_id: str = Field(default="primary", description="Google Calendar id")
    calendar_sync_days: int = Field(
        default=30,
        description="How many days ahead calendar sync looks",
    )
    calendar_sync_max_results: int = Field(
        default=100,
        description="Maximum number of events fetched per calendar sync",
    )
    calendar_time_zone: str = Field(
        default="America/New_York",
        description="Time zone attached to events created or updated through chat actions",
    )

    # Gemini Configuration
    gemini_api_key: str | None = Field(
        default=None,
        description="Gemini API key; chat falls back to rule-based answers when unset",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used for chat, summaries and intent detection",
    )
    chat_history_window: int = Field(
        default=6,
        description="Number of previous chat turns sent to the model",
    )

    # Scheduling Configuration
    work_hour_start: int = Field(default=9, ge=0, le=23, description="Work day start hour")
    work_hour_end: int = Field(default=17, ge=1, le=23, description="Work day end hour")

    # Storage Configuration
    database_path: Path | None = Field(
        default=None,
        description="SQLite database path; in-memory storage is used when unset",
    )

    # Application Configuration
    host: str = Field(default="0.0.0.0", description="HTTP bind host")
    port: int = Field(default=5000, description="HTTP bind port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed by the CORS middleware",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    max_retries: int = Field(
        default=3,
        description="Maximum number of retries for failed model calls",
    )

    @property
    def oauth_redirect_uri(self) -> str:
        base = (self.app_url or DEFAULT_REDIRECT_BASE).rstrip("/")
        return f"{base}/api/auth/google/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
