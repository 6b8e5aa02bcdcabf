from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the auth persistence layer.

    This is separate from shop_auth.db.config.Settings, which focuses on the database layer.
    """

    APP_NAME: str = Field(default="ShopDemo Auth")
    APP_VERSION: str = Field(default="0.1.0")

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )

    # Enumeration defaults
    DEFAULT_PAGE_SIZE: int = Field(
        default=100, ge=1, description="Page size used when walking tables in batches."
    )

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, v):
        """Accept any casing and reject names the logging module does not know."""
        if v is None:
            return "INFO"
        name = str(v).strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return name

    @property
    def log_level(self) -> int:
        """Numeric logging level for LOG_LEVEL."""
        return logging.getLevelName(self.LOG_LEVEL)


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      For simplicity we construct a new instance each time. If caching is desired,
      we can add a module-level cache or lru_cache.
    """
    return AppSettings()
