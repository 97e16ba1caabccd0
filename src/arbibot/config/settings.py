"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arbibot.config.constants import (
    DEFAULT_TRADE_EXECUTION_DELAY,
    NOTIFICATION_QUEUE_SIZE,
    SUBSCRIBER_QUEUE_SIZE,
    TELEGRAM_API_URL,
)


class Settings(BaseSettings):
    """
    Process settings loaded from environment variables.

    Bot behaviour (thresholds, refresh interval, auto-trading) lives in
    the ledger store's BotSettings and is edited at runtime; this class
    only covers how the process itself is wired.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Server
    # =========================================================================

    host: str = Field(
        default="0.0.0.0",
        description="Interface the dashboard server binds to",
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Dashboard server port",
    )

    # =========================================================================
    # Telegram
    # =========================================================================

    telegram_bot_token: SecretStr | None = Field(
        default=None,
        description="Initial Telegram bot token (can be changed from the dashboard)",
    )

    telegram_chat_id: str | None = Field(
        default=None,
        description="Initial Telegram chat id for notifications",
    )

    telegram_api_url: str = Field(
        default=TELEGRAM_API_URL,
        description="Telegram Bot API base URL",
    )

    notification_queue_size: int = Field(
        default=NOTIFICATION_QUEUE_SIZE,
        ge=1,
        le=10_000,
        description="Maximum number of pending outgoing notifications",
    )

    # =========================================================================
    # Simulation
    # =========================================================================

    trade_execution_delay: float = Field(
        default=DEFAULT_TRADE_EXECUTION_DELAY,
        ge=0.0,
        le=60.0,
        description="Simulated settlement time of a trade in seconds",
    )

    subscriber_queue_size: int = Field(
        default=SUBSCRIBER_QUEUE_SIZE,
        ge=1,
        le=10_000,
        description="Per-client outgoing message buffer before the client is dropped",
    )

    auto_start_monitoring: bool = Field(
        default=True,
        description="Start the price simulation loop when the server starts",
    )

    # =========================================================================
    # Logging
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    @field_validator("telegram_bot_token", mode="after")
    @classmethod
    def blank_token_is_none(cls, v: SecretStr | None) -> SecretStr | None:
        """Treat an empty token as unset."""
        if v is not None and not v.get_secret_value().strip():
            return None
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
