"""Configuration management for the collection box service."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("json", "text")
DB_LOG_LEVELS = ("silent", "error", "warn", "info")

_DB_LEVEL_ALIASES = {"1": "silent", "2": "error", "3": "warn", "4": "info", "warning": "warn"}
DEFAULT_SLOW_QUERY_MS = 200


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "info"
    log_format: str = "json"
    db_log_level: str = "warn"
    slow_query_ms: int = DEFAULT_SLOW_QUERY_MS

    # Storage and catalog
    database_url: str = "sqlite+aiosqlite:///./collectionbox.db"
    origin_file: str = "resource/origin.json"

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 8080
    read_timeout_seconds: float = 10.0
    write_timeout_seconds: float = 10.0

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value or "").strip().lower()
        if level == "warning":
            level = "warn"
        return level if level in LOG_LEVELS else "info"

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> str:
        fmt = str(value or "").strip().lower()
        return fmt if fmt in LOG_FORMATS else "json"

    @field_validator("db_log_level", mode="before")
    @classmethod
    def _normalize_db_log_level(cls, value: object) -> str:
        level = str(value or "").strip().lower()
        level = _DB_LEVEL_ALIASES.get(level, level)
        return level if level in DB_LOG_LEVELS else "warn"

    @field_validator("slow_query_ms", mode="before")
    @classmethod
    def _normalize_slow_query_ms(cls, value: object) -> int:
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_SLOW_QUERY_MS
        return parsed if parsed > 0 else DEFAULT_SLOW_QUERY_MS


__all__ = ["Settings", "LOG_LEVELS", "LOG_FORMATS", "DB_LOG_LEVELS"]
