"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Local SQLite file, default credentials accepted
    - STAGING / PRODUCTION: Same stack, but insecure defaults are reported
      at startup so they get replaced before the event opens

Usage:
    from kiosk.core.config import get_settings

    settings = get_settings()
    print(settings.heartbeat_interval_seconds)

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing on a laptop
        PRODUCTION: Live event deployment
        STAGING: Rehearsal before the event with production settings
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


INSECURE_SECRET = "change_this_secret_key"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Secrets and passwords should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Persistence
        database_url: SQLAlchemy async connection string

        # Background export
        redis_url: Redis connection string for Celery
        celery_task_always_eager: Run export tasks inline (tests, single box)

        # Auth
        secret_key: Signing key for session tokens
        admin_token_max_age: Admin session lifetime in seconds
        client_token_max_age: Client session lifetime in seconds

        # Live streams
        heartbeat_interval_seconds: Keepalive period on idle streams
        stream_retry_ms: Reconnect delay advertised to EventSource clients
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Event Kiosk POS",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        default="sqlite+aiosqlite:///./database/kiosk.db",
        description="SQLAlchemy async database URL"
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # ==========================================================================
    # REDIS / CELERY
    # ==========================================================================

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )
    celery_task_always_eager: bool = Field(
        default=False,
        description="Execute Celery tasks in-process instead of on a worker"
    )

    # ==========================================================================
    # AUTHENTICATION
    # ==========================================================================

    secret_key: str = Field(
        default=INSECURE_SECRET,
        description="Secret used to sign session tokens"
    )
    admin_token_max_age: int = Field(
        default=60 * 60 * 24,
        description="Admin session lifetime in seconds (24h)"
    )
    client_token_max_age: int = Field(
        default=60 * 60 * 24 * 7,
        description="Client session lifetime in seconds (7 days)"
    )
    cookie_secure: bool = Field(
        default=False,
        description="Send session cookies over HTTPS only"
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor for new password hashes"
    )

    # ==========================================================================
    # BOOTSTRAP ACCOUNTS
    # ==========================================================================

    admin_username: str = Field(
        default="admin",
        description="Admin account created on startup"
    )
    admin_password: str = Field(
        default="admin123",
        description="Password (re)applied to the admin account on startup"
    )
    default_user_username: str = Field(
        default="22user",
        description="Default staff account created on startup"
    )
    default_user_password: str = Field(
        default="user123",
        description="Password (re)applied to the default staff account"
    )
    master_password: str = Field(
        default="5678",
        description="Confirmation password for wiping all orders"
    )

    # ==========================================================================
    # LIVE STREAMS
    # ==========================================================================

    heartbeat_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Keepalive period for idle event streams"
    )
    stream_retry_ms: int = Field(
        default=3000,
        ge=0,
        description="Reconnect delay advertised to EventSource clients"
    )

    # ==========================================================================
    # FILE STORAGE
    # ==========================================================================

    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    excel_filename: str = Field(
        default="orders.xlsx",
        description="Excel export filename"
    )
    excel_lock_timeout: int = Field(
        default=30,
        description="Seconds to wait for file lock"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        List settings that still carry their insecure development defaults.

        Returns:
            List of offending configuration keys (empty if all replaced)
        """
        insecure = []

        if not self.is_development:
            if self.secret_key == INSECURE_SECRET:
                insecure.append("SECRET_KEY")
            if self.admin_password == "admin123":
                insecure.append("ADMIN_PASSWORD")
            if self.default_user_password == "user123":
                insecure.append("DEFAULT_USER_PASSWORD")
            if self.master_password == "5678":
                insecure.append("MASTER_PASSWORD")

        return insecure


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded only once so every module sees the same values
    for the lifetime of the process.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("kiosk")
