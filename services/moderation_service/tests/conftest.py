from __future__ import annotations

import os
import time
from collections.abc import Sequence

# Settings are read when moderation_service.main is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./moderation-test.db")

import pytest

from moderation_service.domain.exceptions import AuditStoreError
from moderation_service.domain.interfaces import KeyValueStorePort, ViolationAuditPort
from moderation_service.domain.models import Violation, ViolationAuditRecord
from moderation_service.domain.services import KeyValueViolationAuditLog
from moderation_service.domain.validator import ContentValidator
from moderation_service.infrastructure.kv_store import SqlKeyValueStore


class InMemoryKeyValueStore(KeyValueStorePort):
    def __init__(self) -> None:
        self.entries: dict[str, tuple[str, float]] = {}
        self.writes: list[tuple[str, int, str]] = []

    async def set_with_expiry(self, key: str, ttl_seconds: int, value: str) -> None:
        self.writes.append((key, ttl_seconds, value))
        self.entries[key] = (value, time.time() + ttl_seconds)

    async def get(self, key: str) -> str | None:
        entry = self.entries.get(key)
        if entry is None or entry[1] <= time.time():
            return None
        return entry[0]

    async def list_prefix(self, prefix: str) -> list[tuple[str, str]]:
        now = time.time()
        return sorted(
            (key, value)
            for key, (value, expires_at) in self.entries.items()
            if key.startswith(prefix) and expires_at > now
        )

    async def ping(self) -> None:
        return None

    async def purge_expired(self) -> int:
        now = time.time()
        expired = [key for key, (_, expires_at) in self.entries.items() if expires_at <= now]
        for key in expired:
            del self.entries[key]
        return len(expired)


class FailingKeyValueStore(InMemoryKeyValueStore):
    async def ping(self) -> None:
        raise AuditStoreError("connection refused")

    async def set_with_expiry(self, key: str, ttl_seconds: int, value: str) -> None:
        raise AuditStoreError("connection refused")

    async def list_prefix(self, prefix: str) -> list[tuple[str, str]]:
        raise AuditStoreError("connection refused")


class RecordingAuditLog(ViolationAuditPort):
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int]] = []

    async def record(
        self, user_id: str, content: str, violations: Sequence[Violation]
    ) -> None:
        self.calls.append((user_id, content, len(violations)))

    async def history(self, user_id: str) -> list[ViolationAuditRecord]:
        return []


@pytest.fixture()
def validator() -> ContentValidator:
    return ContentValidator()


@pytest.fixture()
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def audit_log(memory_store) -> KeyValueViolationAuditLog:
    return KeyValueViolationAuditLog(memory_store)


@pytest.fixture()
def recording_audit_log() -> RecordingAuditLog:
    return RecordingAuditLog()


@pytest.fixture()
async def sql_store(tmp_path) -> SqlKeyValueStore:
    store = SqlKeyValueStore(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    await store.ensure_schema()
    yield store
    await store.dispose()


@pytest.fixture()
def failing_store() -> FailingKeyValueStore:
    return FailingKeyValueStore()
