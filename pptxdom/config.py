"""Decoder and API configuration.

Uses pydantic-settings for type-safe environment variable handling.
Every setting can be overridden with a ``PPTXDOM_`` prefixed variable.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PPTXDOM_",
        env_file=".env",
        extra="ignore",
    )

    # Application
    app_name: str = "pptxdom"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )

    # Decoder
    theme_cache_size: int = Field(default=10, ge=1)
    max_workers: int = Field(default=1, ge=1, le=32)
    max_package_size_mb: int = Field(default=100, ge=1)
    embed_media_data: bool = True
    embed_image_data: bool = False

    @property
    def max_package_size_bytes(self) -> int:
        """Upper bound for an accepted package, in bytes."""
        return self.max_package_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger and set its level."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
