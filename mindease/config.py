"""
Configuration for the MindEase companion.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from MINDEASE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MINDEASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False
    log_level: str = "info"

    # Durable client store
    storage_dir: Path = Path(".mindease")

    # Response generator
    generator_backend: Literal["local", "http"] = "local"
    generator_url: str = "http://localhost:54321/functions/v1/generate-ai-response"
    generator_api_key: str | None = None

    # Translator
    translator_backend: Literal["none", "http"] = "none"
    translator_url: str = "http://localhost:5000/translate"
    translator_api_key: str | None = None

    # Seconds allowed for each generation or translation call
    request_timeout: float = 15.0

    # Escalation
    advisory_delay: float = 1.0
    escalation_threshold: float = -0.3

    # Defaults
    default_language: str = "en"
    default_topic: str = "general"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()


def configure_logging(level: str) -> None:
    """Install a basic root handler at the given level name."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
