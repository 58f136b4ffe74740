from __future__ import annotations

import pydantic
import pytest

from moderation_service.settings import Settings


def test_defaults():
    settings = Settings(database_url="sqlite+aiosqlite:///./x.db")

    assert settings.service_name == "moderation_service"
    assert settings.validation_cache_size == 10_000
    assert settings.violation_audit_ttl_seconds == 2_592_000
    assert settings.audit_snippet_length == 100
    assert settings.database_echo is False


def test_sync_driver_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        Settings(database_url="postgresql://user:pw@db/moderation")


def test_cache_size_must_be_positive():
    with pytest.raises(pydantic.ValidationError):
        Settings(database_url="sqlite+aiosqlite:///./x.db", validation_cache_size=0)
