from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseServiceSettings(BaseSettings):
    """Environment-driven settings shared by the marketplace services.

    The database URL has no default and must name an async driver,
    e.g. ``postgresql+asyncpg://...`` or ``sqlite+aiosqlite:///...``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(..., description="Service identifier")
    service_port: int = Field(default=8000, ge=1024, le=65535)
    app_version: str = Field(default="0.1.0")
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)

    database_url: SecretStr = Field(..., description="SQLAlchemy async DSN")
    database_echo: bool = Field(default=False, description="Log emitted SQL")
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=20, ge=0, le=200)

    @field_validator("database_url")
    @classmethod
    def _require_async_driver(cls, value: SecretStr) -> SecretStr:
        scheme, _, _ = value.get_secret_value().partition("://")
        if "+" not in scheme:
            raise ValueError("database_url must name an async driver, e.g. postgresql+asyncpg")
        return value
