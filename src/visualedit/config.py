"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/visualedit/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class ParsoidConfig(BaseModel):
    """Parsoid conversion service endpoint."""

    url: str = "http://localhost:8000"
    domain: str = "localhost"
    timeout: float = 100.0

    @model_validator(mode="after")
    def strip_trailing_slash(self) -> ParsoidConfig:
        self.url = self.url.rstrip("/")
        return self


class WikiConfig(BaseModel):
    """Wiki action API and language settings."""

    api_url: str = "http://localhost:8080/w/api.php"
    content_language: str = "en"
    user_language: str = "en"
    collab_pad_page: str = "CollabPad"


class EditorConfig(BaseModel):
    """Save pipeline defaults."""

    action: str = "visualeditoredit"
    deflate_level: int = 5

    @model_validator(mode="after")
    def deflate_level_in_range(self) -> EditorConfig:
        if not 0 <= self.deflate_level <= 9:
            msg = "EDITOR__DEFLATE_LEVEL must be between 0 and 9"
            raise ValueError(msg)
        return self


class DevConfig(BaseModel):
    """Development and testing toggles."""

    parsoid_mock: bool = False


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``PARSOID__URL``, ``WIKI__API_URL``, ``DEV__PARSOID_MOCK``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    parsoid: ParsoidConfig = ParsoidConfig()
    wiki: WikiConfig = WikiConfig()
    editor: EditorConfig = EditorConfig()
    dev: DevConfig = DevConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
