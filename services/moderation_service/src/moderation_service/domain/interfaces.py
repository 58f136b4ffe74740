from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from moderation_service.domain.models import Violation, ViolationAuditRecord


class KeyValueStorePort(ABC):
    @abstractmethod
    async def set_with_expiry(self, key: str, ttl_seconds: int, value: str) -> None:
        """Store value under key, replacing any previous value, for ttl_seconds."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the live value for key, or None when missing or expired."""

    @abstractmethod
    async def list_prefix(self, prefix: str) -> list[tuple[str, str]]:
        """Return live (key, value) pairs whose key starts with prefix, ordered by key."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise when the backing store cannot be reached."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Delete expired entries. Returns the number removed."""


class ViolationAuditPort(ABC):
    @abstractmethod
    async def record(
        self, user_id: str, content: str, violations: Sequence[Violation]
    ) -> None:
        """Persist a truncated audit record of rejected or flagged content."""

    @abstractmethod
    async def history(self, user_id: str) -> list[ViolationAuditRecord]:
        """Return the user's retained audit records, newest first."""
