"""
Central application configuration using pydantic-settings.

This module provides typed access to environment-based configuration for
the game server (bind address, logging, CORS and the optional JSONL room
log directory).
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """
    Configuration for the game server.

    Environment variables (prefix: BANCO_):
        BANCO_HOST          - Bind address (default: 0.0.0.0)
        BANCO_PORT          - Bind port (default: 4000)
        BANCO_LOG_LEVEL     - Python logging level (default: INFO)
        BANCO_CORS_ORIGINS  - Comma separated allowed origins (default: *)
        BANCO_EVENT_LOG_DIR - Directory for per-room JSONL logs (disabled when unset)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="BANCO_",
    )

    host: str = Field(default="0.0.0.0", description="Address the server binds to.")
    port: int = Field(default=4000, ge=1, le=65535, description="Port the server binds to.")
    log_level: str = Field(default="INFO", description="Python logging level.")
    cors_origins: str = Field(default="*", description="Comma separated allowed origins.")
    event_log_dir: Optional[str] = Field(
        default=None,
        description="Directory for per-room JSONL logs; disabled when unset.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> str:
        if not value:
            return "INFO"
        value = str(value).upper()
        if value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {value}")
        return value

    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_server_settings() -> ServerSettings:
    """Return cached server settings instance."""
    return ServerSettings()
