"""SQLite-backed key-value storage for the catalog snapshot."""

from __future__ import annotations

import os
import sqlite3
import time
from pathlib import Path

import structlog

from .errors import IOFailure

log = structlog.get_logger()


class KeyValueStore:
    """Persist string values under fixed keys in a local SQLite database."""

    def __init__(self, db_path: Path | str | None = None):
        if db_path is None:
            data_dir = Path(os.environ.get("BOOKSHELF_DATA_DIR", ".data"))
            data_dir.mkdir(parents=True, exist_ok=True)
            db_path = data_dir / "bookshelf.db"

        self.db_path = db_path
        try:
            # Requests may run on worker threads; dispatches never overlap.
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.execute(
                """CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at REAL
                )"""
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise IOFailure(f"cannot open storage at {db_path}: {e}") from e

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        try:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            log.error("storage_read_failed", key=key, error=str(e))
            raise IOFailure(f"cannot read {key!r}: {e}") from e

        if row is None:
            log.debug("storage_miss", key=key)
            return None
        return row[0]

    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""
        try:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, time.time()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            log.error("storage_write_failed", key=key, error=str(e))
            raise IOFailure(f"cannot write {key!r}: {e}") from e
        log.debug("storage_write", key=key, size=len(value))

    def close(self) -> None:
        self._conn.close()
