from __future__ import annotations

import time

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from moderation_service.domain.exceptions import AuditStoreError
from moderation_service.domain.interfaces import KeyValueStorePort

logger = structlog.get_logger(__name__)

_CREATE_TABLE = text("""
    CREATE TABLE IF NOT EXISTS kv_entries (
        entry_key VARCHAR(512) PRIMARY KEY,
        entry_value TEXT NOT NULL,
        expires_at BIGINT NOT NULL
    )
""")

_CREATE_EXPIRY_INDEX = text("""
    CREATE INDEX IF NOT EXISTS ix_kv_entries_expires_at ON kv_entries (expires_at)
""")


def _now() -> int:
    return int(time.time())


class SqlKeyValueStore(KeyValueStorePort):
    """Key-value store with per-entry expiry on top of a SQL table.

    Expiry is stored as epoch seconds so the same statements run on
    PostgreSQL and SQLite. Expired rows read as missing until purged.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
        engine: AsyncEngine | None = None,
    ) -> None:
        if engine is None:
            engine_kwargs: dict[str, int] = {}
            if not database_url.startswith("sqlite"):
                engine_kwargs = {"pool_size": pool_size, "max_overflow": max_overflow}
            engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
        self._engine: AsyncEngine = engine
        self._session_factory = sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )

    async def ensure_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(_CREATE_TABLE)
            await conn.execute(_CREATE_EXPIRY_INDEX)
        logger.debug("kv_store.schema.ready")

    async def set_with_expiry(self, key: str, ttl_seconds: int, value: str) -> None:
        sql = text("""
            INSERT INTO kv_entries (entry_key, entry_value, expires_at)
            VALUES (:key, :value, :expires_at)
            ON CONFLICT (entry_key) DO UPDATE
            SET entry_value = excluded.entry_value, expires_at = excluded.expires_at
        """)

        try:
            async with self._session_factory() as session:
                await session.execute(
                    sql,
                    {"key": key, "value": value, "expires_at": _now() + ttl_seconds},
                )
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("kv_store.write.failed", key=key, error=str(exc))
            raise AuditStoreError(str(exc)) from exc

        logger.debug("kv_store.write.success", key=key, ttl_seconds=ttl_seconds)

    async def get(self, key: str) -> str | None:
        sql = text("""
            SELECT entry_value FROM kv_entries
            WHERE entry_key = :key AND expires_at > :now
        """)

        try:
            async with self._session_factory() as session:
                result = await session.execute(sql, {"key": key, "now": _now()})
                row = result.first()
        except SQLAlchemyError as exc:
            logger.error("kv_store.read.failed", key=key, error=str(exc))
            raise AuditStoreError(str(exc)) from exc

        return row[0] if row else None

    async def list_prefix(self, prefix: str) -> list[tuple[str, str]]:
        # substr avoids escaping LIKE wildcards that may appear in user ids.
        sql = text("""
            SELECT entry_key, entry_value FROM kv_entries
            WHERE substr(entry_key, 1, :prefix_length) = :prefix AND expires_at > :now
            ORDER BY entry_key
        """)

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    sql,
                    {"prefix": prefix, "prefix_length": len(prefix), "now": _now()},
                )
                rows = result.all()
        except SQLAlchemyError as exc:
            logger.error("kv_store.scan.failed", prefix=prefix, error=str(exc))
            raise AuditStoreError(str(exc)) from exc

        return [(row[0], row[1]) for row in rows]

    async def ping(self) -> None:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise AuditStoreError(str(exc)) from exc

    async def purge_expired(self) -> int:
        sql = text("DELETE FROM kv_entries WHERE expires_at <= :now")

        try:
            async with self._session_factory() as session:
                result = await session.execute(sql, {"now": _now()})
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("kv_store.purge.failed", error=str(exc))
            raise AuditStoreError(str(exc)) from exc

        removed = result.rowcount or 0
        logger.info("kv_store.purged", removed=removed)
        return removed

    async def dispose(self) -> None:
        await self._engine.dispose()
