from __future__ import annotations

import time
from collections.abc import Callable, Sequence

import structlog
from pydantic import ValidationError

from moderation_service.domain.interfaces import KeyValueStorePort, ViolationAuditPort
from moderation_service.domain.models import (
    Violation,
    ViolationAuditRecord,
    ViolationSummary,
)

logger = structlog.get_logger(__name__)

AUDIT_KEY_PREFIX = "content_violations"
AUDIT_TTL_SECONDS = 30 * 24 * 60 * 60
AUDIT_SNIPPET_LENGTH = 100


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class KeyValueViolationAuditLog(ViolationAuditPort):
    """Audit trail of flagged content kept in a key-value store.

    Each record lives under ``content_violations:<user_id>:<timestamp_ms>``
    and expires after ``ttl_seconds``.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        ttl_seconds: int = AUDIT_TTL_SECONDS,
        snippet_length: int = AUDIT_SNIPPET_LENGTH,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._snippet_length = snippet_length
        self._clock = clock

    @staticmethod
    def user_prefix(user_id: str) -> str:
        return f"{AUDIT_KEY_PREFIX}:{user_id}:"

    async def record(
        self, user_id: str, content: str, violations: Sequence[Violation]
    ) -> None:
        record = ViolationAuditRecord(
            content=content[: self._snippet_length],
            violations=[
                ViolationSummary(type=v.type, severity=v.severity, message=v.message)
                for v in violations
            ],
            timestamp=self._clock(),
        )
        key = f"{self.user_prefix(user_id)}{record.timestamp}"
        await self._store.set_with_expiry(key, self._ttl_seconds, record.model_dump_json())

        logger.debug(
            "audit.record.saved",
            user_id=user_id,
            key=key,
            violation_count=len(violations),
        )

    async def history(self, user_id: str) -> list[ViolationAuditRecord]:
        records: list[ViolationAuditRecord] = []
        for key, value in await self._store.list_prefix(self.user_prefix(user_id)):
            try:
                records.append(ViolationAuditRecord.model_validate_json(value))
            except ValidationError as exc:
                logger.warning("audit.record.corrupt", key=key, error=str(exc))
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records
