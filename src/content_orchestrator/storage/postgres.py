"""PostgreSQL-backed state store with automatic table migration."""

from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime, timedelta
from typing import Any


class PostgresStateStore:
    """Persist key-value state entries with expiry in PostgreSQL."""

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ValueError("CONTENT_ORCHESTRATOR_DATABASE_URL is required")
        self.database_url = database_url
        self._lock = threading.Lock()
        self._psycopg, self._dict_row = self._load_psycopg()

    def migrate(self) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS state_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at TIMESTAMPTZ,
                    updated_at TIMESTAMPTZ NOT NULL
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_state_entries_expires_at
                ON state_entries(expires_at)
                """)
            conn.commit()

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> None:
        await asyncio.to_thread(self._set_sync, key, value, ttl_s)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)

    def _set_sync(self, key: str, value: str, ttl_s: int | None) -> None:
        now = datetime.now(tz=UTC)
        expires_at = now + timedelta(seconds=ttl_s) if ttl_s is not None else None
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO state_entries (key, value, expires_at, updated_at)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (key) DO UPDATE
                SET value = EXCLUDED.value,
                    expires_at = EXCLUDED.expires_at,
                    updated_at = EXCLUDED.updated_at
                """,
                (key, value, expires_at, now),
            )
            conn.commit()

    def _get_sync(self, key: str) -> str | None:
        now = datetime.now(tz=UTC)
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM state_entries WHERE key = %s",
                (key,),
            ).fetchone()
            if row is None:
                return None
            expires_at = row.get("expires_at")
            if expires_at is not None and expires_at <= now:
                # Expired rows are purged lazily on read.
                conn.execute("DELETE FROM state_entries WHERE key = %s", (key,))
                conn.commit()
                return None
            return str(row["value"])

    def _delete_sync(self, key: str) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("DELETE FROM state_entries WHERE key = %s", (key,))
            conn.commit()

    def _connect(self) -> Any:
        return self._psycopg.connect(self.database_url, row_factory=self._dict_row)

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any]:
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "PostgreSQL state storage requires psycopg. "
                'Install with: python -m pip install "content-orchestrator[postgres]"'
            ) from exc
        return psycopg, dict_row
