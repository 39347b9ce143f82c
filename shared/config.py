"""
Application configuration using Pydantic Settings.

Values are read from environment variables prefixed with ``DELIVERY_``
(for example ``DELIVERY_LOG_LEVEL=DEBUG``) or from a local ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Settings for the delivery service."""

    model_config = SettingsConfigDict(
        env_prefix="DELIVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage - JSON fixtures used to seed the in-memory store
    data_dir: Optional[Path] = Field(default=PROJECT_ROOT / "data")

    # HTTP
    api_prefix: str = Field(default="/api")
    static_dir: Optional[Path] = Field(default=PROJECT_ROOT / "public")
    cors_origins: list[str] = Field(default=["*"])

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Notifications
    notification_sender: str = Field(default="orders@delivery-service.local")
    notification_workers: int = Field(default=2, ge=1)
    email_fail_rate: float = Field(default=0.0, ge=0.0, le=1.0)

    # Driver assignment
    assign_max_attempts: int = Field(default=3, ge=1)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
