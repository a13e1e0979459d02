from __future__ import annotations

import logging
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Service-level settings for the workshop API.

    Database connection settings live in src.db.config.Settings.
    """

    APP_NAME: str = Field(default="Workshop API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for an automotive workshop. Creates, amends, completes and "
            "deletes work orders together with their parts, labor, stock and worker workload."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed origins, as a JSON array or a comma-separated string.",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=False)

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="Run `alembic upgrade head` against the configured database at startup.",
    )
    CATALOG_AUTO_CREATE: bool = Field(
        default=True,
        description=(
            "Create parts, services and workers referenced by an unknown name; "
            "when false such a reference is rejected as not found."
        ),
    )
    LOG_LEVEL: str = Field(default="INFO", description="Root log level name")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            v = [p.strip() for p in v.split(",")]
        return [origin for origin in (v or []) if origin] or ["*"]

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """Read AppSettings from the environment (and .env when present)."""
    return AppSettings()
