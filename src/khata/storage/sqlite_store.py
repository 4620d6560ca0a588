"""
SQLite key/value store.

Single-file durable cache that survives restarts, the local equivalent of
the mobile app's async storage.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from khata.storage.base import BaseKeyValueStore


class SQLiteStore(BaseKeyValueStore):
    """
    SQLite-backed key/value store.

    Features:
    - Human-inspectable database
    - Whole-value overwrites (no partial merges, no locking needed)
    - Portable single-file database
    """

    def __init__(self, db_path: str | Path):
        self._db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Open the database and create the table."""
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        # Enable WAL mode for better concurrency
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        self._conn.commit()

    async def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("SQLiteStore not initialized")
        return self._conn

    async def get(self, key: str) -> str | None:
        conn = self._require_conn()
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"SQLiteStore values must be str, got {type(value).__name__}")
        conn = self._require_conn()
        conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat()),
        )
        conn.commit()

    async def remove(self, key: str) -> bool:
        conn = self._require_conn()
        cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0

    async def keys(self) -> list[str]:
        conn = self._require_conn()
        rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [row["key"] for row in rows]

    async def updated_at(self, key: str) -> datetime | None:
        """When ``key`` was last written, or None when absent."""
        conn = self._require_conn()
        row = conn.execute("SELECT updated_at FROM kv_store WHERE key = ?", (key,)).fetchone()
        return datetime.fromisoformat(row["updated_at"]) if row else None
