from __future__ import annotations

from pydantic import Field
from shared.config.base import BaseServiceSettings


class Settings(BaseServiceSettings):
    service_name: str = "moderation_service"

    validation_cache_size: int = Field(default=10_000, ge=1)
    violation_audit_ttl_seconds: int = Field(default=30 * 24 * 60 * 60, ge=1)
    audit_snippet_length: int = Field(default=100, ge=1)
    audit_purge_interval_seconds: int = Field(default=3600, ge=1)
