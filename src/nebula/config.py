"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.

Conversion functions never read settings themselves: callers turn the
relevant section into a ``RenderOptions`` value and pass it in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/nebula/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_LOG_LEVELS = frozenset(("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"))


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class RenderConfig(BaseModel):
    """Markdown rendering behaviour."""

    allow_unsafe_html: bool = False
    hard_breaks: bool = True


class EditorConfig(BaseModel):
    """Edit-session tuning."""

    autosave_seconds: float = 1.0
    words_per_minute: int = 220
    max_quote_length: int = 240

    @field_validator("autosave_seconds")
    @classmethod
    def non_negative_debounce(cls, value: float) -> float:
        if value < 0:
            msg = "EDITOR__AUTOSAVE_SECONDS must be >= 0"
            raise ValueError(msg)
        return value

    @field_validator("words_per_minute", "max_quote_length")
    @classmethod
    def positive(cls, value: int) -> int:
        if value <= 0:
            msg = "value must be positive"
            raise ValueError(msg)
        return value


class ExportConfig(BaseModel):
    """Export naming defaults."""

    default_title: str = "Untitled"
    fallback_filename: str = "nebula"


class AppConfig(BaseModel):
    """Process-level configuration."""

    log_dir: Path = Path("logs")
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            msg = f"APP__LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}"
            raise ValueError(msg)
        return upper


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``RENDER__ALLOW_UNSAFE_HTML``, ``EDITOR__AUTOSAVE_SECONDS``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    render: RenderConfig = RenderConfig()
    editor: EditorConfig = EditorConfig()
    export: ExportConfig = ExportConfig()
    app: AppConfig = AppConfig()


@dataclass(frozen=True)
class RenderOptions:
    """Explicit options passed into the conversion engine.

    Attributes:
        allow_unsafe_html: Pass raw HTML through without sanitizing.
        hard_breaks: Render single newlines as ``<br>``.
        default_title: Title used when a document has none.
    """

    allow_unsafe_html: bool = False
    hard_breaks: bool = True
    default_title: str = "Untitled"

    @classmethod
    def from_settings(cls, settings: Settings) -> RenderOptions:
        return cls(
            allow_unsafe_html=settings.render.allow_unsafe_html,
            hard_breaks=settings.render.hard_breaks,
            default_title=settings.export.default_title,
        )


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
