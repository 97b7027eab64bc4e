from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


class Settings(BaseSettings):
    # Local dev: load from .env automatically.
    # In production: you typically inject real env vars instead.
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )

    # Env vars:
    # - USER_ID_SEED (optional): first id handed out, and the value `clear` rewinds to
    # - LOAD_SAMPLE_USERS (optional): pre-load the two sample users at startup
    # - API_HOST / API_PORT (optional)
    # - LOG_LEVEL (optional)
    user_id_seed: int = Field(default=1, ge=1, validation_alias="USER_ID_SEED")
    load_sample_users: bool = Field(default=True, validation_alias="LOAD_SAMPLE_USERS")

    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8080, ge=1, le=65535, validation_alias="API_PORT")

    # Restricted to the names both `logging` and uvicorn understand.
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        level = str(value or "INFO").upper().strip()
        return LOG_LEVEL_ALIASES.get(level, level)


def get_settings() -> Settings:
    """Load settings from environment.

    Keep this as the single canonical constructor for Settings(). FastAPI
    dependencies and tests can override/monkeypatch this function.
    """
    return Settings()
