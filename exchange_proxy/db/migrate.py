"""Database migration utilities.

Migrations are idempotent and keyed by an integer ``schema_version`` stored in
the metadata table.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from . import schema as schema_def
from .schema import init_db

CURRENT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and return resulting schema version."""
    if _needs_expiry_column(db_path):
        _migrate_to_v2(db_path)
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
        return _get_schema_version(conn) or CURRENT_SCHEMA_VERSION
    finally:
        conn.close()


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _needs_expiry_column(db_path: Path) -> bool:
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        if not _table_exists(cur, "metadata"):
            return False
        return not _column_exists(cur, "metadata", "expires_at")
    finally:
        conn.close()


def _migrate_to_v2(db_path: Path) -> None:
    """Version 1 databases stored the rate table without ticker expiry support."""
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("ALTER TABLE metadata ADD COLUMN expires_at REAL")
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _table_exists(cur: sqlite3.Cursor, name: str) -> bool:
    cur.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (name,),
    )
    return cur.fetchone() is not None


def _column_exists(cur: sqlite3.Cursor, table: str, column: str) -> bool:
    cur.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cur.fetchall())
