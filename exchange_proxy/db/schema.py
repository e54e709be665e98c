"""Database schema DDL definitions and initialization utilities.

Tables:
  - metadata: key/value store. Holds the cached rate table (key ``last``),
    short-lived ticker entries (``ticker:<SYMBOL>``, with ``expires_at``) and
    the ``schema_version`` marker.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Sequence

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at REAL, -- unix seconds; NULL never expires
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

METADATA_EXPIRY_INDEX_DDL = """
CREATE INDEX IF NOT EXISTS idx_metadata_expires_at
ON metadata(expires_at)
WHERE expires_at IS NOT NULL;
"""

DDL_ORDER: Sequence[str] = (METADATA_DDL, METADATA_EXPIRY_INDEX_DDL)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
