"""Data Access Layer over the SQLite ``metadata`` key/value table.

Responsibilities
----------------
- Single-key reads and atomic single-key overwrites (upsert).
- Optional per-entry expiry; expired rows read as absent.
- Translate every ``sqlite3`` fault into ``StorageError`` so callers see one
  failure type. Lock waits are bounded by ``timeout`` seconds.
"""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path
from typing import Optional

from exchange_proxy.core.errors import StorageError

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


class KeyValueStore:
    def __init__(self, db_path: Path, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _storage_error(op: str, key: str, exc: sqlite3.Error) -> StorageError:
        locked = isinstance(exc, sqlite3.OperationalError) and "locked" in str(exc)
        if locked:
            return StorageError(f"{op} '{key}' timed out waiting for lock", timeout=True)
        return StorageError(f"{op} '{key}' failed: {exc}")

    # ------------------------------------------------------------------
    # Public API
    def get(self, key: str) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                cur = conn.cursor()
                cur.execute(
                    "SELECT value, expires_at FROM metadata WHERE key = ?", (key,)
                )
                row = cur.fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise self._storage_error("read", key, exc) from exc
        if row is None:
            return None
        if row["expires_at"] is not None and row["expires_at"] <= time.time():
            return None
        return row["value"]

    def put(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds is not None else None
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        f"""
                        INSERT INTO metadata (key, value, expires_at)
                        VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET
                            value = excluded.value,
                            expires_at = excluded.expires_at,
                            updated_at = ({UTC_NOW_SQL})
                        """,
                        (key, value, expires_at),
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise self._storage_error("write", key, exc) from exc

    def purge_expired(self) -> int:
        """Delete expired rows, returning how many were removed."""
        try:
            conn = self._connect()
            try:
                with conn:
                    cur = conn.execute(
                        "DELETE FROM metadata WHERE expires_at IS NOT NULL AND expires_at <= ?",
                        (time.time(),),
                    )
                    return cur.rowcount
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise self._storage_error("purge", "*", exc) from exc
